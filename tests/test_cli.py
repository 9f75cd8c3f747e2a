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


"""End-to-end tests of the command-line entry point."""

import json
import logging
import os
import signal
import threading
from pathlib import Path
from typing import Any

import pytest

from core_fakes import (
    DEFAULT_PROGRAM,
    GoldenWriter,
    OptionsFactory,
    ScriptedCore,
    golden_lines,
    make_core,
    make_memory,
)
from mips_verif.cli import build_parser, load_factory, main, options_from_args, run
from mips_verif.config import HarnessOptions
from mips_verif.errors import ConfigurationError
from mips_verif.sim.harness import RunSummary

FAKES = ["--model", "core_fakes:make_core", "--memory", "core_fakes:make_memory"]


def _write_program_golden(write_golden: GoldenWriter) -> None:
    for channel, lines in golden_lines(DEFAULT_PROGRAM).items():
        write_golden(channel, lines)


class TestArguments:
    """Option parsing and validation."""

    def test_defaults(self) -> None:
        options = options_from_args(build_parser().parse_args(FAKES))
        assert options.benchmark == "nqueens"
        assert options.hexfiles_dir == Path("../hexfiles")
        assert options.check_streams
        assert options.output_trace is None
        assert options.memory_delay_factor == 1.0

    def test_repeatable_flags(self) -> None:
        args = build_parser().parse_args([*FAKES, "-tt", "-mmm", "-s", "-l", "2"])
        options = options_from_args(args)
        assert options.dump_streams == 2
        assert options.memory_debug == 3
        assert not options.check_streams
        assert options.debug_level == 2

    @pytest.mark.parametrize(
        "argv",
        [
            ["--bogus"],
            ["--memory", "core_fakes:make_memory"],
            [*FAKES, "-f", "fast"],
            [*FAKES, "-f", "0"],
            ["--model", "core_fakes", "--memory", "core_fakes:make_memory"],
            ["--model", "no_such_module:make", "--memory", "core_fakes:make_memory"],
        ],
    )
    def test_invalid_configuration_exits_non_zero(self, argv: list[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(argv)
        assert excinfo.value.code == 2


class TestLoadFactory:
    """Resolution of module:attribute references."""

    def test_resolves_callable(self) -> None:
        assert load_factory("core_fakes:ScriptedCore") is ScriptedCore

    def test_missing_attribute(self) -> None:
        with pytest.raises(ConfigurationError, match="no attribute"):
            load_factory("core_fakes:make_nothing")

    def test_not_callable(self) -> None:
        with pytest.raises(ConfigurationError, match="not callable"):
            load_factory("core_fakes:DEFAULT_PROGRAM")


class TestRun:
    """Complete runs against the scripted core."""

    def test_clean_run(
        self,
        hexfiles_dir: Path,
        tmp_path: Path,
        write_golden: GoldenWriter,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _write_program_golden(write_golden)
        trace = tmp_path / "nqueens"
        status = main([*FAKES, "--hexfiles-dir", str(hexfiles_dir), "-o", str(trace)])
        assert status == 0

        out = capsys.readouterr()
        assert "Total time: 135" in out.out
        assert "Instruction count: 4" in out.out
        assert "CPI: 3.25" in out.out
        assert "br_miss: 2" in out.out
        assert "btb hits: 2" in out.out
        assert "ABORTED" not in out.err

        events = json.loads((tmp_path / "nqueens.json").read_text(encoding="utf-8"))["traceEvents"]
        names = {(e["tid"], e["name"]) for e in events}
        assert ("Commit", "C3") in names
        assert ("Rename", "p4") in names

    def test_divergence_aborts(
        self, hexfiles_dir: Path, write_golden: GoldenWriter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        write_golden("pc", ["104"])
        write_golden("wb", [])
        write_golden("ls", [])
        status = main([*FAKES, "--hexfiles-dir", str(hexfiles_dir)])
        assert status == 1
        out = capsys.readouterr()
        assert "Instruction count: 0" in out.out
        assert "== ABORTED =============" in out.err
        assert "Simulation aborted at stop_time=" in out.err

    def test_missing_golden_file(
        self,
        hexfiles_dir: Path,
        capsys: pytest.CaptureFixture[str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        status = main([*FAKES, "--hexfiles-dir", str(hexfiles_dir)])
        assert status == 1
        assert "Failed to open pc golden file" in caplog.text
        assert str(hexfiles_dir / "nqueens.pc.txt") in caplog.text
        assert "Total time" not in capsys.readouterr().out

    def test_non_ascii_golden_byte_after_last_record(
        self, hexfiles_dir: Path, write_golden: GoldenWriter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _write_program_golden(write_golden)
        (hexfiles_dir / "nqueens.pc.txt").write_bytes(b"100\n104\n108\n10c\n\xe9\n")
        status = main([*FAKES, "--hexfiles-dir", str(hexfiles_dir)])
        assert status == 0
        assert "Instruction count: 4" in capsys.readouterr().out

    def test_non_ascii_golden_byte_aborts_with_report(
        self, hexfiles_dir: Path, write_golden: GoldenWriter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _write_program_golden(write_golden)
        (hexfiles_dir / "nqueens.pc.txt").write_bytes(b"100\n104\n\xe9\n")
        status = main([*FAKES, "--hexfiles-dir", str(hexfiles_dir)])
        assert status == 1
        out = capsys.readouterr()
        assert "Instruction count: 2" in out.out
        assert "== ABORTED =============" in out.err

    def test_report_printed_before_trace_is_written(
        self,
        make_options: OptionsFactory,
        write_golden: GoldenWriter,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        _write_program_golden(write_golden)
        options = make_options(output_trace=str(tmp_path / "nqueens"))
        trace_written_at_report: list[bool] = []

        def report(summary: RunSummary) -> None:
            trace_written_at_report.append("Wrote trace" in caplog.text)

        with caplog.at_level(logging.INFO):
            run(options, make_core, make_memory, report=report)
        assert trace_written_at_report == [False]
        assert "Wrote trace" in caplog.text

    def test_record_golden_streams(self, hexfiles_dir: Path, tmp_path: Path) -> None:
        """-s -tt records the live streams with a time column."""
        dump_dir = tmp_path / "dumps"
        dump_dir.mkdir()
        argv = [*FAKES, "--hexfiles-dir", str(hexfiles_dir), "--dump-dir", str(dump_dir)]
        status = main([*argv, "-s", "-tt", "-b", "qsort"])
        assert status == 0
        pc_dump = (dump_dir / "qsort.pc.dump.txt").read_text(encoding="ascii")
        assert pc_dump.splitlines() == ["100 100", "110 104", "120 108", "130 10c"]
        assert (dump_dir / "qsort.wb.dump.txt").read_text(encoding="ascii") == "120 1000 2a\n"

    def test_waveform_factory(
        self, hexfiles_dir: Path, write_golden: GoldenWriter, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_program_golden(write_golden)
        argv = [*FAKES, "--hexfiles-dir", str(hexfiles_dir), "-d"]
        with caplog.at_level("INFO"):
            status = main([*argv, "--waveform", "core_fakes:make_waveform"])
        assert status == 0
        assert "Dumping waveform to simx.fst" in caplog.text


class InterruptingCore(ScriptedCore):
    """ScriptedCore that sends itself SIGINT on a given eval."""

    def __init__(self, sink: Any, interrupt_at_eval: int) -> None:
        super().__init__(sink, finish=False)
        self.interrupt_at_eval = interrupt_at_eval
        self.interrupt_time: int | None = None

    def eval(self) -> None:
        super().eval()
        if self.evals == self.interrupt_at_eval:
            self.interrupt_time = self.sink.time
            os.kill(os.getpid(), signal.SIGINT)


class TestInterrupt:
    """SIGINT requests a bounded drain instead of ending the process."""

    def test_sigint_drains_and_restores_handler(
        self, make_options: OptionsFactory, write_golden: GoldenWriter
    ) -> None:
        _write_program_golden(write_golden)
        cores: list[InterruptingCore] = []

        def make_interrupting_core(sink: Any, options: HarnessOptions) -> InterruptingCore:
            cores.append(InterruptingCore(sink, interrupt_at_eval=10))
            return cores[0]

        before = signal.getsignal(signal.SIGINT)
        summary = run(make_options(), make_interrupting_core, make_memory)

        # eval 10 runs at time 45; the drain starts after that half cycle
        assert cores[0].interrupt_time == 45
        assert summary.aborted
        assert summary.abort_reason == f"interrupted by signal {int(signal.SIGINT)}"
        assert summary.total_time == 45 + 5 + 100
        assert summary.instruction_count == len(DEFAULT_PROGRAM)
        assert signal.getsignal(signal.SIGINT) is before

    def test_run_off_main_thread(
        self, make_options: OptionsFactory, write_golden: GoldenWriter
    ) -> None:
        _write_program_golden(write_golden)
        before = signal.getsignal(signal.SIGINT)
        results: list[RunSummary | ValueError] = []

        def target() -> None:
            try:
                results.append(run(make_options(), make_core, make_memory))
            except ValueError as e:
                results.append(e)

        worker = threading.Thread(target=target)
        worker.start()
        worker.join()

        assert len(results) == 1
        summary = results[0]
        assert isinstance(summary, RunSummary)
        assert summary.total_time == 135
        assert not summary.aborted
        assert signal.getsignal(signal.SIGINT) is before
