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


"""Tests for the per-run simulation context and its event callbacks."""

import json
from pathlib import Path

import pytest

from core_fakes import GoldenWriter, OptionsFactory
from mips_verif.config import STAGE_NAMES
from mips_verif.encoders.stage_events import Stage
from mips_verif.errors import MissingReferenceFile, StreamExhausted, ValueMismatch
from mips_verif.sim.context import SimulationContext


class TestStageEvents:
    """Stage events become trace records at the current time."""

    def test_stage_event_traced(self, tmp_path: Path, make_options: OptionsFactory) -> None:
        base = str(tmp_path / "trace")
        with SimulationContext(make_options(output_trace=base)) as context:
            context.time = 125
            context.stage_event(Stage.ISSUE, 0x400, 2, 7, 1, 0, 0)
            context.stage_event(17, 0, 0, 0, 0, 0, 0)
        events = json.loads(Path(base + ".json").read_text(encoding="utf-8"))["traceEvents"]
        assert len(events) == len(STAGE_NAMES) + 1
        record = events[-1]
        assert (record["tid"], record["name"]) == ("Issue", "C2")
        assert (record["ts"], record["dur"]) == (12500, 1000)

    def test_stage_event_without_trace(self, make_options: OptionsFactory) -> None:
        with SimulationContext(make_options()) as context:
            context.stage_event(Stage.FETCH, 0x400, 0, 0, 0, 0, 0)
            assert context.tracer.event_count == 0


class TestVerification:
    """Divergences become stop requests; missing golden files are fatal."""

    def test_divergence_requests_stop(
        self, make_options: OptionsFactory, write_golden: GoldenWriter
    ) -> None:
        write_golden("pc", ["104"])
        with SimulationContext(make_options()) as context:
            context.time = 100
            context.pc_event(0x100)
        assert context.stop_requested
        assert context.aborted
        assert context.abort_reason == "pc divergence at time=100"
        assert len(context.divergences) == 1
        assert isinstance(context.divergences[0], ValueMismatch)
        assert context.instruction_count == 0

    def test_first_divergence_is_abort_reason(
        self, make_options: OptionsFactory, write_golden: GoldenWriter
    ) -> None:
        write_golden("pc", [])
        write_golden("wb", ["1 2"])
        with SimulationContext(make_options()) as context:
            context.time = 100
            context.pc_event(0x100)
            context.time = 110
            context.wb_event(1, 3)
        assert context.abort_reason == "pc divergence at time=100"
        assert isinstance(context.divergences[0], StreamExhausted)
        assert isinstance(context.divergences[1], ValueMismatch)

    def test_missing_golden_propagates(self, make_options: OptionsFactory) -> None:
        with SimulationContext(make_options()) as context:
            with pytest.raises(MissingReferenceFile):
                context.ls_event(0, 0, 0)

    def test_request_stop_keeps_first_reason(self, make_options: OptionsFactory) -> None:
        context = SimulationContext(make_options())
        context.request_stop("interrupted by signal 2")
        context.request_stop("later")
        assert context.abort_reason == "interrupted by signal 2"


class TestStats:
    """Stats callbacks feed the run statistics."""

    def test_stats_callbacks(self, make_options: OptionsFactory) -> None:
        with SimulationContext(make_options()) as context:
            context.stats_event("br_miss")
            context.stats_event("br_miss")
            context.predictor_event(1, 0)
            context.btb_event(1)
        assert context.stats.count("br_miss") == 2
        assert context.stats.branch_predictions == 1
        assert context.stats.correct_predictions == 0
        assert context.stats.btb_hits == 1

    def test_close_is_idempotent(self, tmp_path: Path, make_options: OptionsFactory) -> None:
        context = SimulationContext(make_options(output_trace=str(tmp_path / "t")))
        context.open()
        context.close()
        context.close()
        assert not context.tracer.is_open
