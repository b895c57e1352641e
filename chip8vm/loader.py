"""
Program loader: font table and ROM image placement.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from .errors import ImageTooLarge, ImageUnreadable

logger = logging.getLogger(__name__)

# CHIP-8 memory map
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
FONT_START = 0x000
FONT_GLYPH_SIZE = 5
FONT_SIZE = 80

# CHIP-8 Font set (hexadecimal digits 0-F)
FONT = np.array([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
], dtype=np.uint8)

ImageData = Union[bytes, bytearray, np.ndarray]


def read_image(path: Union[str, Path]) -> bytes:
    """Read a ROM file from disk"""
    try:
        with open(path, 'rb') as f:
            return f.read()
    except FileNotFoundError:
        raise ImageUnreadable(path, "file not found") from None
    except OSError as e:
        raise ImageUnreadable(path, e.strerror or str(e)) from e


def max_image_size(memory_size: int = MEMORY_SIZE) -> int:
    return memory_size - PROGRAM_START


def load_image(memory: np.ndarray, image: ImageData):
    """
    Copy the font table to the bottom of memory and the image to PROGRAM_START.
    Memory is left untouched if the image does not fit.
    """
    if isinstance(image, np.ndarray):
        rom = image.astype(np.uint8, copy=False).ravel()
    else:
        rom = np.frombuffer(bytes(image), dtype=np.uint8)

    limit = max_image_size(len(memory))
    if len(rom) > limit:
        raise ImageTooLarge(len(rom), limit)

    memory[FONT_START:FONT_START + FONT_SIZE] = FONT
    memory[PROGRAM_START:PROGRAM_START + len(rom)] = rom

    logger.debug("Loaded ROM: %d bytes", len(rom))
    if len(rom) >= 2:
        logger.debug("First instruction: 0x%02X%02X", rom[0], rom[1])
