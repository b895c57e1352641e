import pytest

from chip8vm.config import Config, make_quirks
from chip8vm.machine import Chip8


def assemble(*words: int) -> bytes:
    """Pack 16-bit instruction words big-endian into a ROM image"""
    return b''.join(w.to_bytes(2, 'big') for w in words)


@pytest.fixture
def machine():
    return Chip8(seed=1234)


@pytest.fixture
def make_machine():
    """Build a machine with the given program and optional quirk overrides"""
    def _make(*words, quirks=None, **config):
        emulator = Chip8(Config(quirks=make_quirks(quirks), **config), seed=1234)
        emulator.load_rom(assemble(*words))
        return emulator
    return _make
