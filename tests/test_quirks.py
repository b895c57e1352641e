"""
Each compatibility quirk, on and off.
"""


class TestIndexOverflow:
    def test_sets_flag_when_enabled(self, make_machine):
        emulator = make_machine(0xAFFF, 0x6002, 0xF01E, quirks={'index_overflow': True})
        for _ in range(3):
            emulator.step()
        assert emulator.index_register == 0x1001
        assert emulator.registers[0xF] == 1

    def test_clears_flag_without_overflow(self, make_machine):
        emulator = make_machine(0x6F01, 0xA100, 0x6002, 0xF01E, quirks={'index_overflow': True})
        for _ in range(4):
            emulator.step()
        assert emulator.registers[0xF] == 0

    def test_leaves_flag_when_disabled(self, make_machine):
        emulator = make_machine(0x6F07, 0xAFFF, 0x6002, 0xF01E, quirks={'index_overflow': False})
        for _ in range(4):
            emulator.step()
        assert emulator.index_register == 0x1001
        assert emulator.registers[0xF] == 7


class TestShifting:
    def test_shift_vx_in_place(self, make_machine):
        emulator = make_machine(0x6004, 0x6107, 0x8016, quirks={'shifting': False})
        for _ in range(3):
            emulator.step()
        assert emulator.registers[0] == 0x02
        assert emulator.registers[0xF] == 0

    def test_shift_vy_into_vx(self, make_machine):
        emulator = make_machine(0x6004, 0x6107, 0x8016, quirks={'shifting': True})
        for _ in range(3):
            emulator.step()
        assert emulator.registers[0] == 0x03
        assert emulator.registers[1] == 0x07
        assert emulator.registers[0xF] == 1

    def test_shift_left_vy(self, make_machine):
        emulator = make_machine(0x6001, 0x6180, 0x801E, quirks={'shifting': True})
        for _ in range(3):
            emulator.step()
        assert emulator.registers[0] == 0x00
        assert emulator.registers[0xF] == 1


class TestMemory:
    def test_increments_index(self, make_machine):
        emulator = make_machine(0xA300, 0xF255, quirks={'memory': True})
        emulator.step()
        emulator.step()
        assert emulator.index_register == 0x303

    def test_leaves_index(self, make_machine):
        emulator = make_machine(0xA300, 0xF265, quirks={'memory': False})
        emulator.step()
        emulator.step()
        assert emulator.index_register == 0x300


class TestLogic:
    def test_resets_flag(self, make_machine):
        emulator = make_machine(0x6F05, 0x8011, quirks={'logic': True})
        emulator.step()
        emulator.step()
        assert emulator.registers[0xF] == 0

    def test_keeps_flag(self, make_machine):
        emulator = make_machine(0x6F05, 0x8012, quirks={'logic': False})
        emulator.step()
        emulator.step()
        assert emulator.registers[0xF] == 5


class TestJumping:
    def test_uses_v0(self, make_machine):
        emulator = make_machine(0x6002, 0x6304, 0xB310, quirks={'jumping': False})
        for _ in range(3):
            emulator.step()
        assert emulator.program_counter == 0x312

    def test_uses_vx(self, make_machine):
        emulator = make_machine(0x6002, 0x6304, 0xB310, quirks={'jumping': True})
        for _ in range(3):
            emulator.step()
        assert emulator.program_counter == 0x314


class TestByteCarry:
    def test_disabled_leaves_flag(self, make_machine):
        emulator = make_machine(0x6F09, 0x60FF, 0x7001, quirks={'byte_carry': False})
        for _ in range(3):
            emulator.step()
        assert emulator.registers[0] == 0
        assert emulator.registers[0xF] == 9

    def test_flag_register_itself(self, make_machine):
        emulator = make_machine(0x6FFF, 0x7F02, quirks={'byte_carry': True})
        emulator.step()
        emulator.step()
        assert emulator.registers[0xF] == 1
