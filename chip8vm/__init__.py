"""
chip8vm - a CHIP-8 virtual machine
"""

from .config import Config, DEFAULT_QUIRKS, make_quirks
from .decoder import Instruction, Op, decode
from .errors import (Chip8Error, ExecutionError, IllegalOpcode, ImageTooLarge,
                     ImageUnreadable, LoadError, StackOverflow, StackUnderflow)
from .loader import FONT, MEMORY_SIZE, PROGRAM_START, load_image, read_image
from .machine import Chip8, State

__version__ = "0.1.0"
