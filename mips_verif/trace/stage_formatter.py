#    Copyright 2026 Two Sigma Open Source, LLC
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.

"""Render typed stage events as swimlane trace labels and arguments.

The label and argument layout of every stage is what downstream trace viewers
key on, so it is reproduced field for field, including the omission of
physical-register arguments whose valid bit is clear.
"""

from dataclasses import dataclass

from mips_verif.encoders.op_tables import instruction_name, register_name
from mips_verif.encoders.stage_events import (
    CommitEvent,
    DecodeEvent,
    FetchEvent,
    IssueEvent,
    PhysReg,
    RenameEvent,
    StageEvent,
    decode_stage_event,
)

COMMIT_INDEX_KEY = "Commit Index"


@dataclass(frozen=True)
class TraceArg:
    """One named trace argument; str values are quoted, int values bare."""

    key: str
    value: str | int
    visible: bool = True


@dataclass(frozen=True)
class FormattedEvent:
    lane: str
    label: str
    args: tuple[TraceArg, ...]


def hex_word(value: int) -> str:
    """Format a word as 8 zero-padded hex digits."""
    return f"{value:08x}"


def _phys_arg(key: str, reg: PhysReg) -> TraceArg:
    return TraceArg(key, reg.adjust(1).label, reg.valid)


def _format_fetch(event: FetchEvent) -> tuple[str, tuple[TraceArg, ...]]:
    return "F", (
        TraceArg("pc", hex_word(event.pc)),
        TraceArg("raw_instruction", hex_word(event.raw_instruction)),
    )


def _format_decode(event: DecodeEvent) -> tuple[str, tuple[TraceArg, ...]]:
    return instruction_name(event.instruction), (
        TraceArg("pc", hex_word(event.pc)),
        TraceArg("rw", register_name(event.rw)),
        TraceArg("rs", register_name(event.rs)),
        TraceArg("rt", register_name(event.rt)),
        TraceArg("imm", event.imm),
    )


def _format_rename(event: RenameEvent) -> tuple[str, tuple[TraceArg, ...]]:
    label = event.dst.adjust(1).label if event.dst.valid else "I"
    # old is rendered from the raw word, valid bit included
    return label, (
        TraceArg("pc", hex_word(event.pc)),
        TraceArg(COMMIT_INDEX_KEY, event.commit_index),
        _phys_arg("src1", event.src1),
        _phys_arg("src2", event.src2),
        TraceArg("old", event.old.label),
    )


def _format_issue(event: IssueEvent) -> tuple[str, tuple[TraceArg, ...]]:
    return f"C{event.commit_index}", (
        TraceArg("pc", hex_word(event.pc)),
        TraceArg(COMMIT_INDEX_KEY, event.commit_index),
        TraceArg("result", event.result),
        TraceArg("outcome", event.outcome),
    )


def _format_commit(event: CommitEvent) -> tuple[str, tuple[TraceArg, ...]]:
    return f"C{event.commit_index}", (
        TraceArg("pc", hex_word(event.pc)),
        _phys_arg("dst", event.dst),
        _phys_arg("free", event.free),
        TraceArg(COMMIT_INDEX_KEY, event.commit_index),
    )


_FORMATTERS = {
    FetchEvent: _format_fetch,
    DecodeEvent: _format_decode,
    RenameEvent: _format_rename,
    IssueEvent: _format_issue,
    CommitEvent: _format_commit,
}


def format_stage_event(event: StageEvent) -> FormattedEvent:
    """Produce the lane, label and ordered arguments of a stage event."""
    label, args = _FORMATTERS[type(event)](event)  # type: ignore[operator]
    return FormattedEvent(lane=event.stage.lane, label=label, args=args)


def format_raw_stage_event(stage: int, *words: int) -> FormattedEvent | None:
    """Decode and format a raw envelope; None for unknown stages."""
    event = decode_stage_event(stage, words)
    if event is None:
        return None
    return format_stage_event(event)
