"""
Pure instruction decoder.

Turns a 16-bit word into an Instruction: the opcode kind plus every operand
field extracted from its fixed nibble position. Decoding never touches
machine state, so it can be tested in isolation from execution.
"""

from enum import Enum
from typing import NamedTuple

from .errors import IllegalOpcode


class Op(Enum):
    CLS = 'CLS'
    RET = 'RET'
    SYS = 'SYS'
    JP = 'JP'
    CALL = 'CALL'
    SE_BYTE = 'SE_BYTE'
    SNE_BYTE = 'SNE_BYTE'
    SE_REG = 'SE_REG'
    LD_BYTE = 'LD_BYTE'
    ADD_BYTE = 'ADD_BYTE'
    LD_REG = 'LD_REG'
    OR = 'OR'
    AND = 'AND'
    XOR = 'XOR'
    ADD_REG = 'ADD_REG'
    SUB = 'SUB'
    SHR = 'SHR'
    SUBN = 'SUBN'
    SHL = 'SHL'
    SNE_REG = 'SNE_REG'
    LD_I = 'LD_I'
    JP_V0 = 'JP_V0'
    RND = 'RND'
    DRW = 'DRW'
    SKP = 'SKP'
    SKNP = 'SKNP'
    LD_VX_DT = 'LD_VX_DT'
    LD_KEY = 'LD_KEY'
    LD_DT_VX = 'LD_DT_VX'
    LD_ST_VX = 'LD_ST_VX'
    ADD_I = 'ADD_I'
    LD_FONT = 'LD_FONT'
    BCD = 'BCD'
    STORE_REGS = 'STORE_REGS'
    LOAD_REGS = 'LOAD_REGS'


class Instruction(NamedTuple):
    kind: Op
    x: int
    y: int
    n: int
    kk: int
    nnn: int
    word: int


# Fixed-opcode forms keyed by top nibble, dispatched on a secondary field
_SIMPLE_OPS = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_BYTE,
    0x4: Op.SNE_BYTE,
    0x6: Op.LD_BYTE,
    0x7: Op.ADD_BYTE,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

_REGISTER_OPS = {  # 8xyN, keyed by N
    0x0: Op.LD_REG,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REG,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

_KEY_OPS = {  # ExKK, keyed by KK
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

_MISC_OPS = {  # FxKK, keyed by KK
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_KEY,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I,
    0x29: Op.LD_FONT,
    0x33: Op.BCD,
    0x55: Op.STORE_REGS,
    0x65: Op.LOAD_REGS,
}


def decode(word: int, address: int = 0) -> Instruction:
    """
    Decode a single CHIP-8 instruction word.
    Raises IllegalOpcode (tagged with `address`) for unrecognised patterns.
    """
    word = int(word) & 0xFFFF

    # Extract components
    opcode = (word & 0xF000) >> 12
    x = (word & 0x0F00) >> 8
    y = (word & 0x00F0) >> 4
    n = word & 0x000F
    kk = word & 0x00FF
    nnn = word & 0x0FFF

    if word == 0x00E0:
        kind = Op.CLS
    elif word == 0x00EE:
        kind = Op.RET
    elif opcode == 0x0:
        kind = Op.SYS
    elif opcode in _SIMPLE_OPS:
        kind = _SIMPLE_OPS[opcode]
    elif opcode == 0x5 and n == 0:
        kind = Op.SE_REG
    elif opcode == 0x9 and n == 0:
        kind = Op.SNE_REG
    elif opcode == 0x8 and n in _REGISTER_OPS:
        kind = _REGISTER_OPS[n]
    elif opcode == 0xE and kk in _KEY_OPS:
        kind = _KEY_OPS[kk]
    elif opcode == 0xF and kk in _MISC_OPS:
        kind = _MISC_OPS[kk]
    else:
        raise IllegalOpcode(word, address)

    return Instruction(kind, x, y, n, kk, nnn, word)
