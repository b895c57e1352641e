"""
Exceptions raised by the CHIP-8 virtual machine.

Load-time errors (LoadError) are raised before any instruction runs.
Execution-time errors (ExecutionError) are raised before the failing
instruction mutates any machine state, so the program counter still
points at the offending instruction.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all virtual machine errors"""


class LoadError(Chip8Error):
    """The program image could not be placed into memory"""


class ImageUnreadable(LoadError):
    def __init__(self, path, reason: Optional[str] = None):
        self.path = str(path)
        self.reason = reason
        message = f"ROM file {self.path} is invalid or does not exist"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ImageTooLarge(LoadError):
    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(f"ROM too large: {size} bytes, max {max_size}")


class ExecutionError(Chip8Error):
    """Raised by Chip8.step() when an instruction cannot be executed"""

    def __init__(self, message: str, address: int):
        self.address = address
        super().__init__(f"{message} at PC=0x{address:03X}")


class IllegalOpcode(ExecutionError):
    def __init__(self, opcode: int, address: int = 0):
        self.opcode = opcode
        super().__init__(f"Unknown instruction 0x{opcode:04X}", address)


class StackOverflow(ExecutionError):
    def __init__(self, address: int, depth: int):
        self.depth = depth
        super().__init__(f"Stack overflow (depth {depth})", address)


class StackUnderflow(ExecutionError):
    def __init__(self, address: int):
        super().__init__("RET with empty stack", address)
