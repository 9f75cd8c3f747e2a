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

"""Golden-stream monitors for externally visible events.

Monitors
--------
PcStreamMonitor
    Compares retired program counters against <benchmark>.pc.txt.

WriteBackStreamMonitor
    Compares memory write-backs (address, data) against <benchmark>.wb.txt.

LoadStoreStreamMonitor
    Compares load/store accesses (op, address, data) against <benchmark>.ls.txt.

Usage
-----
The SimulationContext builds the three channels from the run options::

    monitors = StreamMonitors.from_options(options)
    monitors.pc.observe(pc, time=context.time)
"""

from mips_verif.monitors.stream_monitors import (
    LoadStoreStreamMonitor,
    PcStreamMonitor,
    StreamMonitor,
    StreamMonitors,
    WriteBackStreamMonitor,
)

__all__ = [
    "LoadStoreStreamMonitor",
    "PcStreamMonitor",
    "StreamMonitor",
    "StreamMonitors",
    "WriteBackStreamMonitor",
]
