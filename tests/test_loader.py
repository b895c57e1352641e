"""
Loader tests: font placement, image placement and the size limit.
"""

import numpy as np
import pytest

from chip8vm.errors import ImageTooLarge, ImageUnreadable
from chip8vm.loader import (FONT, FONT_SIZE, MEMORY_SIZE, PROGRAM_START, load_image,
                            max_image_size, read_image)
from chip8vm.machine import Chip8, State


class TestLoadImage:
    def test_font_is_copied_to_low_memory(self):
        memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        load_image(memory, b'\x12\x00')
        assert list(memory[:FONT_SIZE]) == list(FONT)
        assert len(FONT) == 80

    def test_image_lands_at_program_start(self):
        memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        load_image(memory, bytes([0xA2, 0x0A, 0x60, 0x0C]))
        assert list(memory[PROGRAM_START:PROGRAM_START + 4]) == [0xA2, 0x0A, 0x60, 0x0C]
        assert memory[PROGRAM_START + 4] == 0

    def test_accepts_numpy_and_bytearray(self):
        memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        load_image(memory, np.array([0x00, 0xE0], dtype=np.uint8))
        assert memory[PROGRAM_START + 1] == 0xE0
        load_image(memory, bytearray([0x00, 0xEE]))
        assert memory[PROGRAM_START + 1] == 0xEE

    def test_exact_maximum_size_fits(self):
        memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        image = bytes([0xAB]) * (MEMORY_SIZE - PROGRAM_START)
        load_image(memory, image)
        assert memory[MEMORY_SIZE - 1] == 0xAB
        assert max_image_size() == 3584

    def test_one_byte_too_large_fails(self):
        memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        with pytest.raises(ImageTooLarge) as excinfo:
            load_image(memory, bytes(MEMORY_SIZE - PROGRAM_START + 1))
        assert excinfo.value.size == 3585
        assert excinfo.value.max_size == 3584
        # Nothing was written
        assert not memory.any()


class TestReadImage:
    def test_reads_file(self, tmp_path):
        rom = tmp_path / "game.ch8"
        rom.write_bytes(b'\x00\xE0\x12\x00')
        assert read_image(rom) == b'\x00\xE0\x12\x00'

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageUnreadable) as excinfo:
            read_image(tmp_path / "missing.ch8")
        assert "missing.ch8" in str(excinfo.value)

    def test_directory_is_unreadable(self, tmp_path):
        with pytest.raises(ImageUnreadable):
            read_image(tmp_path)


class TestMachineLoadRom:
    def test_load_from_path_sets_running_and_pc(self, tmp_path):
        rom = tmp_path / "game.ch8"
        rom.write_bytes(b'\x60\x05')
        emulator = Chip8()
        emulator.pause()
        emulator.load_rom(str(rom))
        assert emulator.state == State.RUNNING
        assert emulator.program_counter == PROGRAM_START
        assert emulator.rom_name == str(rom)

    def test_load_twice_is_rejected(self):
        emulator = Chip8()
        emulator.load_rom(b'\x60\x05')
        with pytest.raises(RuntimeError):
            emulator.load_rom(b'\x60\x05')
        emulator.reset()
        emulator.load_rom(b'\x60\x06')

    def test_memory_round_trip(self):
        emulator = Chip8()
        for address in range(MEMORY_SIZE):
            value = (address * 7 + 3) & 0xFF
            emulator.memory[address] = value
            assert emulator.memory[address] == value
