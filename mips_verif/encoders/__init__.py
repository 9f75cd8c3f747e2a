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

"""Decoding of the raw values reported by the hardware model.

Modules
-------
op_tables
    Instruction and ALU operation enumerations, the MIPS register name table
    and the startup check of the ALU opcode encoding.

stage_events
    Stage discriminant, physical-register encoding and the typed events
    decoded from the six-word pipeline-stage envelope.
"""

from mips_verif.encoders.op_tables import (
    AluOperation,
    Instruction,
    alu_operation_name,
    instruction_name,
    register_name,
)
from mips_verif.encoders.stage_events import PhysReg, Stage, StageEvent, decode_stage_event

__all__ = [
    "AluOperation",
    "Instruction",
    "PhysReg",
    "Stage",
    "StageEvent",
    "alu_operation_name",
    "decode_stage_event",
    "instruction_name",
    "register_name",
]
