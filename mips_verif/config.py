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

"""Central configuration for the verification harness.

Configuration
=============

This module contains the configuration constants used throughout the harness.
Centralizing these values keeps the timing model, the trace format and the
golden-file layout in one place.

Organization:
    Constants are organized into logical sections:
    - Machine Word Configuration (masks, envelope width)
    - Simulation Timing (time quantum, reset, drain budget)
    - Trace Configuration (scale, durations, record limit)
    - Golden Stream Configuration (file suffixes)
    - Run Options (HarnessOptions dataclass)
    - DUT Port Configuration (EventPortNames dataclass, cocotb front end)

Usage:
    >>> from mips_verif.config import HarnessOptions, TIME_PER_CYCLE
    >>> options = HarnessOptions(benchmark="nqueens", output_trace="out/trace")
    >>> options.golden_path("pc")
    PosixPath('../hexfiles/nqueens.pc.txt')
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

# ============================================================================
# Machine Word Configuration
# ============================================================================

WORD_BITS: Final[int] = 32
"""Width of a machine word exchanged with the hardware model."""

MASK32: Final[int] = (1 << WORD_BITS) - 1
"""32-bit mask (0xFFFF_FFFF)."""

SIGN_BIT32: Final[int] = 1 << (WORD_BITS - 1)
"""Sign bit of a 32-bit word."""

STAGE_EVENT_WORDS: Final[int] = 6
"""Number of raw words in every pipeline-stage event envelope."""

NUM_ARCH_REGISTERS: Final[int] = 32
"""Number of MIPS architectural registers ($0-$31)."""

# ============================================================================
# Simulation Timing
# ============================================================================

TIME_QUANTUM: Final[int] = 5
"""Simulated time that passes on every half clock cycle."""

TIME_PER_CYCLE: Final[int] = 2 * TIME_QUANTUM
"""Simulated time of one full clock cycle."""

RESET_DEASSERT_TIME: Final[int] = 100
"""Simulated time at which reset is released."""

DRAIN_TIME_BUDGET: Final[int] = 100
"""Extra simulated time granted after an interrupt or divergence (10 cycles)."""

# ============================================================================
# Trace Configuration
# ============================================================================

TRACE_TIME_SCALE: Final[int] = 100
"""Factor applied to simulation time before it is written as a trace timestamp."""

EVENT_DURATION: Final[int] = 1000
"""Duration written for every pipeline-stage trace record."""

PLACEHOLDER_DURATION: Final[int] = 1
"""Duration of the per-lane placeholder records written on creation."""

TRACE_EVENT_LIMIT: Final[int] = 100_000
"""Maximum number of event records written to one trace artifact."""

TRACE_FILE_SUFFIX: Final[str] = ".json"
"""Suffix appended to the configured trace output base path."""

STAGE_NAMES: Final[tuple[str, ...]] = ("Fetch", "Decode", "Rename", "Issue", "Commit")
"""Lane names, indexed by stage discriminant."""

# ============================================================================
# Golden Stream Configuration
# ============================================================================

DEFAULT_BENCHMARK: Final[str] = "nqueens"
"""Benchmark selected when none is given."""

DEFAULT_HEXFILES_DIR: Final[str] = "../hexfiles"
"""Directory holding benchmark images and golden stream files."""

GOLDEN_FILE_SUFFIX: Final[str] = ".txt"
"""Suffix of golden stream files (<benchmark>.<channel><suffix>)."""

DUMP_FILE_SUFFIX: Final[str] = ".dump.txt"
"""Suffix of dumped streams, written next to the golden files."""

IMAGE_FILE_SUFFIX: Final[str] = ".hex"
"""Suffix of the benchmark memory image."""

DUMP_WITH_TIME_LEVEL: Final[int] = 2
"""Dump level from which every dumped line is prefixed with the time."""

# ============================================================================
# Run Options
# ============================================================================


@dataclass
class HarnessOptions:
    """Options for a single harness run.

    This is a dataclass so the options are passed explicitly to every
    component instead of living in process-wide variables.

    Basic Parameters:
        benchmark: Selects the input image and golden file set
        hexfiles_dir: Directory with <benchmark>.hex and golden streams
        output_trace: Trace output base path (".json" appended); None disables tracing
        trace_fragment: Write the trace records without the enclosing envelope

    Stream Options:
        check_streams: Compare live streams against golden files
        dump_streams: 0 = off, 1 = dump live streams, 2 = dump with time column
        dump_dir: Directory for dumped streams (defaults to hexfiles_dir)
        print_events: Echo every stream event to the console

    Model Options:
        dump_waveform: Ask the waveform recorder to dump every step
        memory_debug: Verbosity passed to the memory service
        memory_delay_factor: Latency multiplier passed to the memory service
        debug_level: Harness debug level (>= 1 enables debug logging)
    """

    benchmark: str = DEFAULT_BENCHMARK
    hexfiles_dir: Path = field(default_factory=lambda: Path(DEFAULT_HEXFILES_DIR))
    output_trace: str | None = None
    trace_fragment: bool = False
    check_streams: bool = True
    dump_streams: int = 0
    dump_dir: Path | None = None
    print_events: bool = False
    dump_waveform: bool = False
    memory_debug: int = 0
    memory_delay_factor: float = 1.0
    debug_level: int = 0

    def __post_init__(self) -> None:
        """Normalize path fields given as strings."""
        self.hexfiles_dir = Path(self.hexfiles_dir)
        if self.dump_dir is not None:
            self.dump_dir = Path(self.dump_dir)

    def golden_path(self, channel_suffix: str) -> Path:
        """Return the golden stream file for a channel (e.g. "pc")."""
        return self.hexfiles_dir / f"{self.benchmark}.{channel_suffix}{GOLDEN_FILE_SUFFIX}"

    def dump_path(self, channel_suffix: str) -> Path:
        """Return the file a channel's live stream is dumped to."""
        directory = self.dump_dir if self.dump_dir is not None else self.hexfiles_dir
        return directory / f"{self.benchmark}.{channel_suffix}{DUMP_FILE_SUFFIX}"

    @property
    def image_path(self) -> Path:
        """Memory image consumed by the memory service."""
        return self.hexfiles_dir / f"{self.benchmark}{IMAGE_FILE_SUFFIX}"

    @property
    def trace_path(self) -> Path | None:
        """Trace artifact path, or None when tracing is disabled."""
        if self.output_trace is None:
            return None
        return Path(self.output_trace + TRACE_FILE_SUFFIX)


# ============================================================================
# DUT Port Configuration (cocotb front end)
# ============================================================================


@dataclass
class EventPortNames:
    """Names of the event ports sampled on a cocotb DUT.

    This allows the cocotb front end to adapt to different top-level port
    naming without changing harness code.

    Stage Ports:
        Each pipeline stage has a valid bit and a 192-bit data bus carrying
        the six 32-bit event words, word 0 in the least significant bits.
        The port names are formed as f"{stage_valid_prefix}{stage}" and
        f"{stage_data_prefix}{stage}" with the lowercase stage name.

        >>> custom = EventPortNames(clock="clk_i", reset_n="rstn_i")
        >>> sampler = EventPortSampler(dut, context, custom)
    """

    clock: str = "clk"
    reset_n: str = "rst_n"
    done: str = "done"

    stage_valid_prefix: str = "o_stage_vld_"
    stage_data_prefix: str = "o_stage_data_"

    pc_valid: str = "o_pc_vld"
    pc: str = "o_pc"

    wb_valid: str = "o_wb_vld"
    wb_addr: str = "o_wb_addr"
    wb_data: str = "o_wb_data"

    ls_valid: str = "o_ls_vld"
    ls_op: str = "o_ls_op"
    ls_addr: str = "o_ls_addr"
    ls_data: str = "o_ls_data"

    bp_valid: str = "o_bp_vld"
    bp_predicted: str = "o_bp_predicted"
    bp_actual: str = "o_bp_actual"

    btb_valid: str = "o_btb_vld"
    btb_hit: str = "o_btb_hit"

    stats_pulses: dict[str, str] = field(
        default_factory=lambda: {"o_br_miss": "br_miss", "o_ic_miss": "ic_miss"}
    )
    """Single-bit ports counted as stats labels (port name -> label)."""
