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

"""Text report printed at the end of a run."""

from mips_verif.sim.harness import RunSummary

SUMMARY_COLUMNS: tuple[tuple[str, int], ...] = (
    ("Benchmark", 10),
    ("Cycle count", 12),
    ("Instruction count", 20),
    ("CPI", 13),
    ("IPC", 13),
    ("br_miss", 12),
    ("ic_miss", 12),
    ("correct prediction", 20),
    ("total branch", 20),
)


def format_report(summary: RunSummary) -> str:
    """Totals, derived metrics and per-label statistics."""
    lines = [
        "",
        "",
        f"Total time: {summary.total_time}",
        f"Cycle count: {summary.cycle_count}",
        f"Instruction count: {summary.instruction_count}",
        f"CPI: {summary.cpi:g} IPC: {summary.ipc:g}",
    ]
    return "\n".join(lines) + "\n" + summary.stats.report()


def format_abort_notice(summary: RunSummary) -> str:
    notice = f"\n== ABORTED =============\nSimulation aborted at stop_time={summary.total_time}"
    if summary.abort_reason:
        notice += f" ({summary.abort_reason})"
    return notice


def format_summary_table(summary: RunSummary) -> str:
    """One-line, fixed-width summary suitable for collecting across benchmarks."""
    stats = summary.stats
    values = (
        summary.benchmark,
        str(summary.cycle_count),
        str(summary.instruction_count),
        f"{summary.cpi:f}",
        f"{summary.ipc:f}",
        str(stats.count("br_miss")),
        str(stats.count("ic_miss")),
        str(stats.correct_predictions),
        str(stats.branch_predictions),
    )
    header = " ".join(f"{name:>{width}}" for name, width in SUMMARY_COLUMNS)
    row = " ".join(f"{value:>{width}}" for value, (_, width) in zip(values, SUMMARY_COLUMNS))
    return f"{header}\n{row}"
