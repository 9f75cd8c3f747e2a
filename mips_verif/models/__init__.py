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

"""Collaborator contracts and run statistics.

Modules
-------
interfaces
    Protocols for the hardware model, the timed memory service, the waveform
    recorder and the EventSink the model reports to.

stats_model
    Labelled event counters and branch predictor / BTB statistics.
"""

from mips_verif.models.interfaces import EventSink, HardwareModel, MemoryService, WaveformRecorder
from mips_verif.models.stats_model import StatsModel

__all__ = [
    "EventSink",
    "HardwareModel",
    "MemoryService",
    "StatsModel",
    "WaveformRecorder",
]
