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

"""Command-line entry point for running a benchmark on a hardware model.

Usage:
    mips-verif --model pkg.verilated:make_core --memory pkg.mem:make_memory \\
        -b nqueens -o out/nqueens

The hardware model and the memory service are loaded from
"package.module:attribute" references. They are called as:

    model = model_factory(context, options)
    memory = memory_factory(options.image_path, options, model)
    waveform = waveform_factory(model)          # only with --waveform
"""

import argparse
import importlib
import logging
import signal
import sys
import threading
from collections.abc import Callable, Sequence
from typing import Any

from mips_verif.config import DEFAULT_BENCHMARK, DEFAULT_HEXFILES_DIR, HarnessOptions
from mips_verif.errors import ConfigurationError, MissingReferenceFile
from mips_verif.sim.context import SimulationContext
from mips_verif.sim.harness import Harness, RunSummary
from mips_verif.sim.report import format_abort_notice, format_report, format_summary_table

log = logging.getLogger(__name__)


def load_factory(reference: str) -> Callable[..., Any]:
    """Resolve a "package.module:attribute" reference to a callable.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be resolved.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Expected 'module:attribute', got {reference!r}")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import {module_name!r}: {e}") from e
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise ConfigurationError(f"{module_name!r} has no attribute {attr_path!r}") from e
    if not callable(target):
        raise ConfigurationError(f"{reference!r} is not callable")
    return target


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mips-verif",
        description="Run a benchmark on a MIPS core model, verify it against golden streams "
        "and record a pipeline trace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --model core:make --memory mem:make              # nqueens, checked
  %(prog)s --model core:make --memory mem:make -b qsort -o out/qsort
  %(prog)s --model core:make --memory mem:make -s -tt       # record new golden streams
""",
    )
    parser.add_argument(
        "-d", "--dump-waveform", action="store_true", help="Dump a waveform of the run"
    )
    parser.add_argument(
        "-m",
        "--memory-debug",
        action="count",
        default=0,
        help="Increase memory service verbosity (repeatable)",
    )
    parser.add_argument(
        "-p", "--print-events", action="store_true", help="Print every pc/wb/ls event"
    )
    parser.add_argument(
        "-s", "--skip-check", action="store_true", help="Do not verify against golden streams"
    )
    parser.add_argument(
        "-t",
        "--dump-streams",
        action="count",
        default=0,
        help="Dump live streams next to the golden files (twice: with time column)",
    )
    parser.add_argument(
        "-f",
        "--memory-delay-factor",
        type=float,
        default=1.0,
        metavar="FACTOR",
        help="Latency multiplier for the memory service (default: 1.0)",
    )
    parser.add_argument(
        "-b",
        "--benchmark",
        default=DEFAULT_BENCHMARK,
        help=f"Benchmark name (default: {DEFAULT_BENCHMARK})",
    )
    parser.add_argument(
        "-o",
        "--output-trace",
        default=None,
        metavar="BASE",
        help="Write a pipeline trace to BASE.json",
    )
    parser.add_argument(
        "-l", "--debug-level", type=int, default=0, metavar="LEVEL", help="Harness debug level"
    )
    parser.add_argument(
        "--hexfiles-dir",
        default=DEFAULT_HEXFILES_DIR,
        help="Directory with benchmark images and golden streams "
        f"(default: {DEFAULT_HEXFILES_DIR})",
    )
    parser.add_argument(
        "--dump-dir", default=None, help="Directory for dumped streams (default: --hexfiles-dir)"
    )
    parser.add_argument(
        "--trace-fragment",
        action="store_true",
        help="Write trace records without the enclosing JSON envelope",
    )
    parser.add_argument(
        "--model", required=True, metavar="MODULE:ATTR", help="Hardware model factory"
    )
    parser.add_argument(
        "--memory", required=True, metavar="MODULE:ATTR", help="Memory service factory"
    )
    parser.add_argument(
        "--waveform", default=None, metavar="MODULE:ATTR", help="Waveform recorder factory"
    )
    return parser


def options_from_args(args: argparse.Namespace) -> HarnessOptions:
    if args.memory_delay_factor <= 0:
        raise ConfigurationError("--memory-delay-factor must be positive")
    if args.debug_level < 0:
        raise ConfigurationError("--debug-level must not be negative")
    return HarnessOptions(
        benchmark=args.benchmark,
        hexfiles_dir=args.hexfiles_dir,
        output_trace=args.output_trace,
        trace_fragment=args.trace_fragment,
        check_streams=not args.skip_check,
        dump_streams=args.dump_streams,
        dump_dir=args.dump_dir,
        print_events=args.print_events,
        dump_waveform=args.dump_waveform,
        memory_debug=args.memory_debug,
        memory_delay_factor=args.memory_delay_factor,
        debug_level=args.debug_level,
    )


def run(
    options: HarnessOptions,
    model_factory: Callable[..., Any],
    memory_factory: Callable[..., Any],
    waveform_factory: Callable[..., Any] | None = None,
    report: Callable[[RunSummary], None] | None = None,
) -> RunSummary:
    """Build the collaborators for one run and drive it to completion.

    SIGINT requests a drain instead of killing the process, so the trace and
    the dumped streams are still closed properly. The handler is only
    installed on the main thread; other threads run without one.

    Args:
        options: Run options
        model_factory: Called as model_factory(context, options)
        memory_factory: Called as memory_factory(image_path, options, model)
        waveform_factory: Called as waveform_factory(model), if given
        report: Called with the summary before the trace is finalized

    Raises:
        MissingReferenceFile: A golden stream needed for checking is missing.
    """
    with SimulationContext(options) as context:
        model = model_factory(context, options)
        memory = memory_factory(options.image_path, options, model)
        waveform = waveform_factory(model) if waveform_factory is not None else None
        harness = Harness(model, memory, context, waveform=waveform)

        def _interrupt_handler(signum: int, frame: Any) -> None:
            context.request_stop(f"interrupted by signal {signum}")

        on_main_thread = threading.current_thread() is threading.main_thread()
        previous = signal.signal(signal.SIGINT, _interrupt_handler) if on_main_thread else None
        try:
            summary = harness.run()
        finally:
            if on_main_thread:
                signal.signal(signal.SIGINT, previous)
        if report is not None:
            report(summary)
        return summary


def print_report(summary: RunSummary) -> None:
    """Print the report and summary table; the abort notice goes to stderr."""
    print(format_report(summary))
    if summary.aborted:
        print(format_abort_notice(summary), file=sys.stderr)
    print(format_summary_table(summary))


def main(argv: Sequence[str] | None = None) -> int:
    """Run from the command line; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug_level >= 1 else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = options_from_args(args)
        model_factory = load_factory(args.model)
        memory_factory = load_factory(args.memory)
        waveform_factory = load_factory(args.waveform) if args.waveform else None
    except ConfigurationError as e:
        parser.error(str(e))

    try:
        summary = run(
            options, model_factory, memory_factory, waveform_factory, report=print_report
        )
    except MissingReferenceFile as e:
        log.error("%s", e)
        return 1
    except OSError as e:
        log.error("I/O error: %s", e)
        return 1

    return 1 if summary.aborted else 0


if __name__ == "__main__":
    sys.exit(main())
