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

"""Simulation context owning all mutable state of one run.

Simulation Context
==================

The context is the EventSink handed to the hardware model. It holds the
simulated time, the trace artifact, the golden-stream monitors and the
statistics, and dispatches every model callback to them synchronously.

Divergence Handling:
    A stream divergence must not unwind the model's eval(), so it is caught
    here, reported with full context and turned into a stop request. The
    harness observes the request after the current half cycle and starts
    the bounded drain. Only the first divergence becomes the abort reason.

    MissingReferenceFile is not caught: it ends the run immediately.

Lifecycle:
    with SimulationContext(options) as context:   # opens the trace
        ...                                       # run the harness
    # monitors and trace are closed here
"""

import logging
from collections.abc import Callable
from types import TracebackType

from mips_verif.config import EVENT_DURATION, HarnessOptions
from mips_verif.errors import StreamDivergence
from mips_verif.models.stats_model import StatsModel
from mips_verif.monitors.stream_monitors import StreamMonitors
from mips_verif.trace.stage_formatter import format_raw_stage_event
from mips_verif.trace.tracer import SwimlaneTracer

log = logging.getLogger(__name__)


class SimulationContext:
    """Per-run state and the model-facing event callbacks.

    Attributes:
        options: Run options
        time: Current simulated time, advanced by the harness
        tracer: Swimlane trace writer
        monitors: Golden-stream channels
        stats: Labelled counters and branch statistics
        stop_requested: A divergence or interrupt asked the run to stop
        abort_reason: Why the run was asked to stop (first request wins)
        divergences: Every divergence reported during the run
    """

    def __init__(
        self,
        options: HarnessOptions,
        tracer: SwimlaneTracer | None = None,
        monitors: StreamMonitors | None = None,
        stats: StatsModel | None = None,
    ) -> None:
        self.options = options
        self.time = 0
        self.tracer = tracer or SwimlaneTracer(
            options.output_trace, fragment=options.trace_fragment
        )
        self.monitors = monitors or StreamMonitors.from_options(options)
        self.stats = stats or StatsModel()
        self.stop_requested = False
        self.abort_reason: str | None = None
        self.divergences: list[StreamDivergence] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Create the trace artifact (no-op without a trace path)."""
        self.tracer.create()

    def close(self) -> None:
        """Close golden/dump files and finalize the trace exactly once."""
        if self._closed:
            return
        self._closed = True
        self.monitors.close()
        self.tracer.destroy()

    def __enter__(self) -> "SimulationContext":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def request_stop(self, reason: str) -> None:
        """Ask the harness to drain and stop; later requests keep the first reason."""
        if not self.stop_requested:
            self.stop_requested = True
            self.abort_reason = reason

    @property
    def aborted(self) -> bool:
        return self.stop_requested

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    @property
    def instruction_count(self) -> int:
        return self.monitors.pc.observed

    @property
    def write_back_count(self) -> int:
        return self.monitors.write_back.observed

    @property
    def load_store_count(self) -> int:
        return self.monitors.load_store.observed

    # ------------------------------------------------------------------
    # EventSink callbacks
    # ------------------------------------------------------------------

    def stage_event(self, stage: int, a: int, b: int, c: int, d: int, e: int, f: int) -> None:
        """Format a pipeline-stage envelope and append it to the trace."""
        if not self.tracer.enabled:
            return
        formatted = format_raw_stage_event(stage, a, b, c, d, e, f)
        if formatted is None:
            log.debug("Ignoring event for unknown stage %d", stage)
            return
        if self.options.debug_level >= 2:
            log.debug("[%d] %s %s", self.time, formatted.lane, formatted.label)
        self.tracer.record(
            formatted.lane, formatted.label, self.time, EVENT_DURATION, *formatted.args
        )

    def pc_event(self, pc: int) -> None:
        self._verify(self.monitors.pc.observe, pc)

    def wb_event(self, addr: int, data: int) -> None:
        self._verify(self.monitors.write_back.observe, addr, data)

    def ls_event(self, op: int, addr: int, data: int) -> None:
        self._verify(self.monitors.load_store.observe, op, addr, data)

    def stats_event(self, label: str) -> None:
        self.stats.record(label)

    def predictor_event(self, predicted: int, actual: int) -> None:
        self.stats.branch_outcome(predicted, actual)

    def btb_event(self, hit: int) -> None:
        self.stats.btb_hit(hit)

    def _verify(self, observe: Callable[..., None], *values: int) -> None:
        try:
            observe(*values, time=self.time)
        except StreamDivergence as e:
            self.divergences.append(e)
            log.error("\n!! %s", e)
            self.request_stop(f"{e.channel} divergence at time={e.time}")
