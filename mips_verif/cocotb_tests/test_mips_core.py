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

"""Run one benchmark on the RTL core and verify it against golden streams.

Test MIPS Core
==============

The harness drives clk/rst_n itself (one Timer per half cycle) so that
simulated time, reset release and the drain budget match a Verilator run
exactly. The benchmark image must already be loaded by the testbench.

Environment:
    BENCHMARK       benchmark name (default: nqueens)
    HEXFILES_DIR    golden stream directory (default: ../hexfiles)
    OUTPUT_TRACE    trace output base path (default: no trace)
    SKIP_CHECK      "1" disables golden verification
    DUMP_STREAMS    0, 1 or 2
    PRINT_EVENTS    "1" echoes pc/wb/ls events
    DEBUG_LEVEL     harness debug level
"""

import os
from typing import Any

import cocotb
from cocotb.triggers import Timer

from mips_verif.config import (
    DEFAULT_BENCHMARK,
    DEFAULT_HEXFILES_DIR,
    TIME_QUANTUM,
    HarnessOptions,
)
from mips_verif.cocotb_tests.dut_adapter import (
    CocotbModelAdapter,
    EventPortSampler,
    NullMemoryService,
)
from mips_verif.sim.context import SimulationContext
from mips_verif.sim.harness import Harness
from mips_verif.sim.report import format_abort_notice, format_report, format_summary_table


def options_from_environment(env: dict[str, str] | None = None) -> HarnessOptions:
    """Build run options from the environment set up by the test runner."""
    env_map = os.environ if env is None else env
    return HarnessOptions(
        benchmark=env_map.get("BENCHMARK", DEFAULT_BENCHMARK),
        hexfiles_dir=env_map.get("HEXFILES_DIR", DEFAULT_HEXFILES_DIR),
        output_trace=env_map.get("OUTPUT_TRACE") or None,
        check_streams=env_map.get("SKIP_CHECK", "0") != "1",
        dump_streams=int(env_map.get("DUMP_STREAMS", "0")),
        print_events=env_map.get("PRINT_EVENTS", "0") == "1",
        debug_level=int(env_map.get("DEBUG_LEVEL", "0")),
    )


@cocotb.test()
async def test_mips_core(dut: Any) -> None:
    """Run the benchmark to completion; fail on any golden stream divergence."""
    options = options_from_environment()
    cocotb.log.info(f"Running {options.benchmark} (golden streams in {options.hexfiles_dir})")

    with SimulationContext(options) as context:
        model = CocotbModelAdapter(dut)
        sampler = EventPortSampler(dut, context, model.ports)
        harness = Harness(model, NullMemoryService(), context)

        harness.start()
        while harness.should_continue():
            harness.begin_half_cycle()
            await Timer(TIME_QUANTUM, unit="ns")
            if harness.clk:
                sampler.sample()
            harness.end_half_cycle()
        summary = harness.finish()

    cocotb.log.info(format_report(summary))
    cocotb.log.info("\n" + format_summary_table(summary))

    if summary.aborted:
        for divergence in context.divergences:
            cocotb.log.error(str(divergence))
        raise AssertionError(format_abort_notice(summary).strip())
