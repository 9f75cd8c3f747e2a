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


"""cocotb front end: run the harness against an RTL simulation of the core.

Modules
-------
dut_adapter
    CocotbModelAdapter (the hardware model contract over a DUT handle),
    EventPortSampler (event ports -> SimulationContext) and NullMemoryService.

test_mips_core
    The cocotb test that runs one benchmark through the harness.
"""
