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

"""Name tables for the values the hardware model reports.

Op Tables
=========

This module is the central registry of the closed enumerations carried in
pipeline-stage events:

    1. Instruction: decoded instruction mnemonics (decode stage events)
    2. AluOperation: ALU control codes used by the hardware
    3. REGISTER_NAMES: MIPS calling-convention names of $0-$31

Architecture:
    Each enumeration is generated from one authoritative name list. The list
    order is the numeric encoding, so adding a mnemonic means appending it
    to the list (and, for ALU operations, to the hardware as well).

ALU Encoding Contract:
    The hardware interprets ALU operations positionally. ALU_OPCODE_CONTRACT
    pins every operation to its opcode and check_alu_encoding_contract() runs
    at import time, so a reordered list fails on startup instead of silently
    mislabelling every trace record.

Example Usage:
    >>> instruction_name(Instruction.ADDIU)
    'ADDIU'
    >>> alu_operation_name(99)
    '(unknown operation)'
    >>> register_name(29)
    'sp'
"""

from enum import IntEnum
from typing import Final

from mips_verif.config import NUM_ARCH_REGISTERS
from mips_verif.errors import ConfigurationError

UNKNOWN_INSTRUCTION: Final[str] = "(unknown instruction)"
UNKNOWN_OPERATION: Final[str] = "(unknown operation)"
INVALID_REGISTER: Final[str] = "(invalid register)"

# ============================================================================
# Instructions
# ============================================================================

INSTRUCTION_NAMES: Final[tuple[str, ...]] = (
    "ADD",
    "ADDU",
    "SUB",
    "SUBU",
    "ADDI",
    "ADDIU",
    "AND",
    "OR",
    "XOR",
    "NOR",
    "ANDI",
    "ORI",
    "XORI",
    "SLL",
    "SRL",
    "SRA",
    "SLLV",
    "SRLV",
    "SRAV",
    "SLT",
    "SLTU",
    "SLTI",
    "SLTIU",
    "LUI",
    "J",
    "JAL",
    "JR",
    "JALR",
    "BEQ",
    "BNE",
    "BLEZ",
    "BGEZ",
    "BLTZ",
    "BGTZ",
    "LW",
    "SW",
    "MTC0",
    "INVALID",
)

Instruction = IntEnum("Instruction", INSTRUCTION_NAMES, start=0)  # type: ignore[misc]

# ============================================================================
# ALU Operations
# ============================================================================

# Order must match the hardware's ALU control encoding.
ALU_OPERATION_NAMES: Final[tuple[str, ...]] = (
    "NOP",
    "ADD",
    "ADDU",
    "SUB",
    "SUBU",
    "AND",
    "OR",
    "XOR",
    "SLT",
    "SLTU",
    "SLL",
    "SRL",
    "SRA",
    "SLLV",
    "SRLV",
    "SRAV",
    "NOR",
    "MTC0_PASS",
    "MTC0_FAIL",
    "MTC0_DONE",
    "BA",
    "BEQ",
    "BNE",
    "BLEZ",
    "BGTZ",
    "BGEZ",
    "BLTZ",
)

AluOperation = IntEnum("AluOperation", ALU_OPERATION_NAMES, start=0)  # type: ignore[misc]

ALU_OPERATION_COUNT: Final[int] = 27
"""Number of ALU control codes implemented by the hardware."""

ALU_OPCODE_CONTRACT: Final[dict[str, int]] = {
    "NOP": 0,
    "ADD": 1,
    "ADDU": 2,
    "SUB": 3,
    "SUBU": 4,
    "AND": 5,
    "OR": 6,
    "XOR": 7,
    "SLT": 8,
    "SLTU": 9,
    "SLL": 10,
    "SRL": 11,
    "SRA": 12,
    "SLLV": 13,
    "SRLV": 14,
    "SRAV": 15,
    "NOR": 16,
    "MTC0_PASS": 17,
    "MTC0_FAIL": 18,
    "MTC0_DONE": 19,
    "BA": 20,
    "BEQ": 21,
    "BNE": 22,
    "BLEZ": 23,
    "BGTZ": 24,
    "BGEZ": 25,
    "BLTZ": 26,
}
"""Hardware ALU control code of every operation."""

# ============================================================================
# Architectural Registers
# ============================================================================

REGISTER_NAMES: Final[tuple[str, ...]] = (
    "zero",
    "at",
    "v0",
    "v1",
    "a0",
    "a1",
    "a2",
    "a3",
    "t0",
    "t1",
    "t2",
    "t3",
    "t4",
    "t5",
    "t6",
    "t7",
    "s0",
    "s1",
    "s2",
    "s3",
    "s4",
    "s5",
    "s6",
    "s7",
    "t8",
    "t9",
    "k0",
    "k1",
    "gp",
    "sp",
    "s8",
    "ra",
)


def _lookup(names: tuple[str, ...], value: int, sentinel: str) -> str:
    if 0 <= value < len(names):
        return names[value]
    return sentinel


def instruction_name(value: int) -> str:
    """Return the mnemonic of an instruction code, or the unknown sentinel."""
    return _lookup(INSTRUCTION_NAMES, int(value), UNKNOWN_INSTRUCTION)


def alu_operation_name(value: int) -> str:
    """Return the name of an ALU control code, or the unknown sentinel."""
    return _lookup(ALU_OPERATION_NAMES, int(value), UNKNOWN_OPERATION)


def register_name(index: int) -> str:
    """Return the calling-convention name of an architectural register."""
    return _lookup(REGISTER_NAMES, int(index), INVALID_REGISTER)


def check_alu_encoding_contract() -> None:
    """Verify AluOperation against the hardware opcode table.

    The register name table is checked here too since it is indexed by the
    same raw words.

    Raises:
        ConfigurationError: If the enumeration length, ordinals or names
            disagree with ALU_OPCODE_CONTRACT.
    """
    if len(AluOperation) != ALU_OPERATION_COUNT:
        raise ConfigurationError(
            f"AluOperation has {len(AluOperation)} members, "
            f"hardware implements {ALU_OPERATION_COUNT}"
        )
    for ordinal, operation in enumerate(AluOperation):
        if operation.value != ordinal:
            raise ConfigurationError(
                f"AluOperation.{operation.name} has ordinal {operation.value}, expected {ordinal}"
            )
        opcode = ALU_OPCODE_CONTRACT.get(operation.name)
        if opcode != operation.value:
            raise ConfigurationError(
                f"AluOperation.{operation.name}={operation.value} "
                f"but hardware opcode is {opcode}"
            )
    if len(REGISTER_NAMES) != NUM_ARCH_REGISTERS:
        raise ConfigurationError(
            f"{len(REGISTER_NAMES)} register names for {NUM_ARCH_REGISTERS} registers"
        )


check_alu_encoding_contract()
