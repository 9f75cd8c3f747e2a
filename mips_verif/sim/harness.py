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

"""Clocked orchestration loop.

Harness
=======

Steps the hardware model half cycle by half cycle, feeds the timed memory
service and stops on completion or after a bounded drain.

State Machine:
    ┌────────────┐ time == RESET_DEASSERT_TIME ┌─────────┐
    │ RESETTING  │ ──────────────────────────► │ RUNNING │
    └────────────┘                             └─────────┘
          │ stop requested                          │ stop requested
          ▼                                         ▼
    ┌──────────────────────────────────────────────────────┐
    │ DRAINING (stop_time = time + DRAIN_TIME_BUDGET)      │
    └──────────────────────────────────────────────────────┘
          │ model.done or time >= stop_time
          ▼
    ┌──────────┐
    │ STOPPED  │   (model.done also stops RESETTING/RUNNING directly)
    └──────────┘

Half Cycle:
    1. Toggle clk; on the rising half, memory.consume(time)
    2. Release reset when time reaches RESET_DEASSERT_TIME
    3. model.eval() (callbacks reach the SimulationContext)
    4. On the rising half, memory.drive(time) then memory.process(time)
    5. Dump waveform, advance time by TIME_QUANTUM
    6. Enter DRAINING if a stop was requested

Steps 1-2 and 4-6 are exposed as begin_half_cycle()/end_half_cycle() so the
cocotb front end can replace step 3 with a simulator time step.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mips_verif.config import (
    DRAIN_TIME_BUDGET,
    RESET_DEASSERT_TIME,
    TIME_PER_CYCLE,
    TIME_QUANTUM,
)
from mips_verif.models.interfaces import HardwareModel, MemoryService, WaveformRecorder
from mips_verif.models.stats_model import StatsModel
from mips_verif.sim.context import SimulationContext

log = logging.getLogger(__name__)

WAVEFORM_PATH = Path("simx.fst")


class HarnessState(Enum):
    RESETTING = "resetting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


@dataclass
class RunSummary:
    """Final accounting of one run."""

    benchmark: str
    total_time: int
    instruction_count: int
    stats: StatsModel
    aborted: bool = False
    abort_reason: str | None = None

    @property
    def cycle_count(self) -> int:
        return self.total_time // TIME_PER_CYCLE

    @property
    def cpi(self) -> float:
        """Cycles per instruction; inf when nothing retired."""
        if self.instruction_count == 0:
            return math.inf
        return self.cycle_count / self.instruction_count

    @property
    def ipc(self) -> float:
        """Instructions per cycle; 0.0 before the first cycle."""
        if self.cycle_count == 0:
            return 0.0
        return self.instruction_count / self.cycle_count


class Harness:
    """Drive a hardware model and memory service for one run.

    Usage:
        with SimulationContext(options) as context:
            model = factory(context, options)
            summary = Harness(model, memory, context).run()
    """

    def __init__(
        self,
        model: HardwareModel,
        memory: MemoryService,
        context: SimulationContext,
        waveform: WaveformRecorder | None = None,
    ) -> None:
        """Initialize harness.

        Args:
            model: Hardware model; its callbacks must target context
            memory: Timed memory service attached to the model
            context: Per-run state
            waveform: Optional waveform backend, used when dump_waveform is set
        """
        self.model = model
        self.memory = memory
        self.context = context
        self.waveform = waveform if context.options.dump_waveform else None
        self.state = HarnessState.STOPPED
        self.clk = 0
        self.stop_time = 0

        if context.options.dump_waveform and waveform is None:
            log.warning("Waveform dump requested but no waveform recorder is attached")

    @property
    def time(self) -> int:
        return self.context.time

    def start(self) -> None:
        """Hold the clock low, assert reset and reset the memory service."""
        self.clk = 0
        self.model.clk = 0
        self.model.rst_n = 0
        self.memory.drive_reset()
        self.state = HarnessState.RESETTING
        if self.waveform is not None:
            log.info("Dumping waveform to %s", WAVEFORM_PATH)
            self.waveform.open(WAVEFORM_PATH)

    def should_continue(self) -> bool:
        """True until the model is done or the drain budget is used up."""
        if self.model.done:
            return False
        if self.state is HarnessState.DRAINING and self.time >= self.stop_time:
            return False
        return self.state is not HarnessState.STOPPED

    def begin_half_cycle(self) -> None:
        """Toggle the clock, feed pending memory requests, release reset."""
        self.clk = 0 if self.clk else 1
        self.model.clk = self.clk
        if self.clk:
            self.memory.consume(self.time)
        if self.time == RESET_DEASSERT_TIME:
            self.model.rst_n = 1
            if self.state is HarnessState.RESETTING:
                self.state = HarnessState.RUNNING

    def end_half_cycle(self) -> None:
        """Drive memory responses, advance time and honor stop requests."""
        if self.clk:
            self.memory.drive(self.time)
            self.memory.process(self.time)
        if self.waveform is not None:
            self.waveform.dump(self.time)

        self.context.time += TIME_QUANTUM

        if self.context.stop_requested and self.state is not HarnessState.DRAINING:
            self.state = HarnessState.DRAINING
            self.stop_time = self.time + DRAIN_TIME_BUDGET
            log.warning(
                "\n!! Interrupt raised at time=%d\n"
                "!! Running additional %d cycles before terminating at stop_time=%d",
                self.time,
                DRAIN_TIME_BUDGET // TIME_PER_CYCLE,
                self.stop_time,
            )

    def step(self) -> None:
        """Advance the simulation by one half cycle."""
        self.begin_half_cycle()
        self.model.eval()
        self.end_half_cycle()

    def finish(self) -> RunSummary:
        """Stop the model and compute the final accounting."""
        self.state = HarnessState.STOPPED
        self.model.final()
        if self.waveform is not None:
            self.waveform.close()
        return self.summary()

    def summary(self) -> RunSummary:
        return RunSummary(
            benchmark=self.context.options.benchmark,
            total_time=self.time,
            instruction_count=self.context.instruction_count,
            stats=self.context.stats,
            aborted=self.context.aborted,
            abort_reason=self.context.abort_reason,
        )

    def run(self) -> RunSummary:
        """Run until the model is done or a requested stop has drained."""
        self.start()
        while self.should_continue():
            self.step()
        return self.finish()
