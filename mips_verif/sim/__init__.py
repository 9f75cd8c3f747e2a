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

"""Run orchestration: per-run context, clocked loop and final report.

Modules
-------
context
    SimulationContext, the EventSink handed to the hardware model. Owns the
    simulated time, tracer, golden-stream monitors and statistics.

harness
    Harness state machine (RESETTING -> RUNNING -> DRAINING -> STOPPED) and
    the RunSummary it produces.

report
    Text formatting of a RunSummary.
"""

from mips_verif.sim.context import SimulationContext
from mips_verif.sim.harness import Harness, HarnessState, RunSummary

__all__ = [
    "Harness",
    "HarnessState",
    "RunSummary",
    "SimulationContext",
]
