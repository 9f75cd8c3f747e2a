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

"""MIPS core verification and tracing harness.

This package drives a clocked, pipelined MIPS processor model cycle by cycle,
renders its pipeline-stage events into a swimlane trace for a trace viewer,
and replays its externally visible event streams (retired PCs, write-backs,
loads/stores) against golden reference files.

The hardware model and the timed memory model are external collaborators;
see models.interfaces for the contracts they must satisfy.
"""

from ._version import __version__

__all__ = [
    "__version__",
]
