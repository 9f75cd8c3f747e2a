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

"""Typed pipeline-stage events decoded from the six-word envelope.

Stage Events
============

The hardware model reports pipeline activity as a stage discriminant plus
exactly six 32-bit words. The meaning of the words depends on the stage:

    ┌─────────┬────────┬──────────────┬───────────┬─────────┬─────────┬─────────┐
    │ Stage   │ word 0 │ word 1       │ word 2    │ word 3  │ word 4  │ word 5  │
    ├─────────┼────────┼──────────────┼───────────┼─────────┼─────────┼─────────┤
    │ Fetch   │ pc     │ raw insn     │           │         │         │         │
    │ Decode  │ pc     │ instruction  │ rw        │ rs      │ rt      │ imm     │
    │ Rename  │ pc     │ commit index │ old       │ dst     │ src1    │ src2    │
    │ Issue   │ pc     │ commit index │ result    │ outcome │         │         │
    │ Commit  │ pc     │ commit index │ dst       │ free    │         │         │
    └─────────┴────────┴──────────────┴───────────┴─────────┴─────────┴─────────┘

decode_stage_event() is the only place that interprets the words; it builds
one of the frozen dataclasses below field by field.

Physical Register Encoding:
    The envelope has no room for a per-register valid flag, so physical
    register words carry it in bit 0 and the physical index in the bits above.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from mips_verif.config import MASK32, SIGN_BIT32, STAGE_EVENT_WORDS, STAGE_NAMES, WORD_BITS


class Stage(IntEnum):
    """Pipeline stage discriminant."""

    FETCH = 0
    DECODE = 1
    RENAME = 2
    ISSUE = 3
    COMMIT = 4

    @property
    def lane(self) -> str:
        """Trace lane name of the stage."""
        return STAGE_NAMES[self.value]


def to_unsigned32(value: int) -> int:
    """Wrap a model word into the unsigned 32-bit domain."""
    return value & MASK32


def to_signed32(value: int) -> int:
    """Interpret a model word as a signed 32-bit value."""
    value &= MASK32
    return value - (1 << WORD_BITS) if value & SIGN_BIT32 else value


@dataclass(frozen=True)
class PhysReg:
    """Physical register word: bit 0 is the valid flag, bits above the index."""

    encoded: int

    @classmethod
    def encode(cls, index: int, valid: bool = True) -> "PhysReg":
        """Pack a physical index and its valid flag."""
        if index < 0:
            raise ValueError(f"Physical register index must be non-negative, got {index}")
        return cls((index << 1) | int(valid))

    def adjust(self, n: int) -> "PhysReg":
        """Return the register shifted right by n bits."""
        return PhysReg(self.encoded >> n)

    @property
    def valid(self) -> bool:
        return bool(self.encoded & 1)

    @property
    def index(self) -> int:
        return self.adjust(1).encoded

    @property
    def label(self) -> str:
        """Trace label of the raw word, e.g. "p7"."""
        return f"p{self.encoded}"


@dataclass(frozen=True)
class FetchEvent:
    pc: int
    raw_instruction: int

    stage = Stage.FETCH


@dataclass(frozen=True)
class DecodeEvent:
    pc: int
    instruction: int
    rw: int
    rs: int
    rt: int
    imm: int

    stage = Stage.DECODE


@dataclass(frozen=True)
class RenameEvent:
    pc: int
    commit_index: int
    old: PhysReg
    dst: PhysReg
    src1: PhysReg
    src2: PhysReg

    stage = Stage.RENAME


@dataclass(frozen=True)
class IssueEvent:
    pc: int
    commit_index: int
    result: int
    outcome: int

    stage = Stage.ISSUE


@dataclass(frozen=True)
class CommitEvent:
    pc: int
    commit_index: int
    dst: PhysReg
    free: PhysReg

    stage = Stage.COMMIT


StageEvent = FetchEvent | DecodeEvent | RenameEvent | IssueEvent | CommitEvent


def decode_stage_event(stage: int, words: Sequence[int]) -> StageEvent | None:
    """Build the typed event for a stage from its six raw words.

    Args:
        stage: Stage discriminant reported by the model
        words: Exactly six raw words (signed or unsigned ints)

    Returns:
        The stage-specific event, or None for an unknown discriminant.

    Raises:
        ValueError: If the envelope does not hold exactly six words.
    """
    if len(words) != STAGE_EVENT_WORDS:
        raise ValueError(
            f"Stage event envelope must hold {STAGE_EVENT_WORDS} words, got {len(words)}"
        )
    a, b, c, d, e, f = (to_unsigned32(w) for w in words)

    if stage == Stage.FETCH:
        return FetchEvent(pc=a, raw_instruction=b)
    if stage == Stage.DECODE:
        return DecodeEvent(pc=a, instruction=b, rw=c, rs=d, rt=e, imm=to_signed32(f))
    if stage == Stage.RENAME:
        return RenameEvent(
            pc=a,
            commit_index=to_signed32(b),
            old=PhysReg(c),
            dst=PhysReg(d),
            src1=PhysReg(e),
            src2=PhysReg(f),
        )
    if stage == Stage.ISSUE:
        return IssueEvent(
            pc=a,
            commit_index=to_signed32(b),
            result=to_signed32(c),
            outcome=to_signed32(d),
        )
    if stage == Stage.COMMIT:
        return CommitEvent(pc=a, commit_index=to_signed32(b), dst=PhysReg(c), free=PhysReg(d))
    return None


def unpack_stage_words(bus: int) -> tuple[int, ...]:
    """Split a packed six-word bus (word 0 in the low bits) into its words."""
    words = []
    bit = 0
    for _ in range(STAGE_EVENT_WORDS):
        words.append((bus >> bit) & MASK32)
        bit += WORD_BITS
    return tuple(words)


def pack_stage_words(words: Sequence[int]) -> int:
    """Pack six words into one bus value, inverse of unpack_stage_words."""
    if len(words) != STAGE_EVENT_WORDS:
        raise ValueError(
            f"Stage event envelope must hold {STAGE_EVENT_WORDS} words, got {len(words)}"
        )
    bus = 0
    for position, word in enumerate(words):
        bus |= to_unsigned32(word) << (position * WORD_BITS)
    return bus
