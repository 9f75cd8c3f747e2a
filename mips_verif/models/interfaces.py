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

"""Contracts of the collaborators the harness drives.

Interfaces
==========

The hardware model, the timed memory service and the waveform recorder are
implemented outside this package (a Verilator binding, a cocotb DUT adapter,
or a pure-Python stand-in in tests). These protocols let the harness work
with any object that provides the listed members, and keep the dependency on
them explicit.

Event Flow:
    The model is constructed with an EventSink (the SimulationContext) and
    calls its methods synchronously from inside eval():

    ┌──────────────┐  eval()   ┌──────────────────┐  stage_event, pc_event, ...
    │   Harness    │ ────────► │  HardwareModel   │ ───────────────────────────┐
    └──────────────┘           └──────────────────┘                            ▼
                                                                   ┌──────────────────┐
                                                                   │ SimulationContext│
                                                                   └──────────────────┘
"""

from pathlib import Path
from typing import Protocol


class EventSink(Protocol):
    """Receiver of the event callbacks emitted by the hardware model."""

    def stage_event(self, stage: int, a: int, b: int, c: int, d: int, e: int, f: int) -> None:
        """Pipeline stage activity as a discriminant plus six raw words."""
        ...

    def pc_event(self, pc: int) -> None:
        """An instruction retired at pc."""
        ...

    def wb_event(self, addr: int, data: int) -> None:
        """A memory write-back."""
        ...

    def ls_event(self, op: int, addr: int, data: int) -> None:
        """A load/store access."""
        ...

    def stats_event(self, label: str) -> None:
        """A labelled occurrence (e.g. "br_miss")."""
        ...

    def predictor_event(self, predicted: int, actual: int) -> None:
        """A resolved branch prediction."""
        ...

    def btb_event(self, hit: int) -> None:
        """A branch-target-buffer lookup."""
        ...


class HardwareModel(Protocol):
    """Clocked pipeline model: clock/reset inputs, done output, evaluate."""

    clk: int
    rst_n: int

    @property
    def done(self) -> bool:
        """True once the program has finished."""
        ...

    def eval(self) -> None:
        """Evaluate the model for the current input values."""
        ...

    def final(self) -> None:
        """Finish the model after the last evaluation."""
        ...


class MemoryService(Protocol):
    """Timed memory model attached to the hardware model's memory ports."""

    def drive_reset(self) -> None:
        """Drive the memory ports to their reset values."""
        ...

    def consume(self, time: int) -> None:
        """Accept requests issued by the model in the last cycle."""
        ...

    def drive(self, time: int) -> None:
        """Drive responses onto the model's memory ports."""
        ...

    def process(self, time: int) -> None:
        """Advance outstanding requests to time."""
        ...


class WaveformRecorder(Protocol):
    """Optional waveform backend (e.g. an FST writer bound to the model)."""

    def open(self, path: Path) -> None:
        ...

    def dump(self, time: int) -> None:
        ...

    def close(self) -> None:
        ...
