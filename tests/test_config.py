import pytest

from chip8vm.config import DEFAULT_QUIRKS, Config, color_to_hex, color_to_rgb, make_quirks


class TestQuirks:
    def test_defaults(self):
        quirks = make_quirks()
        assert quirks == DEFAULT_QUIRKS
        assert quirks is not DEFAULT_QUIRKS

    def test_override(self):
        quirks = make_quirks({'shifting': True, 'memory': False})
        assert quirks['shifting'] is True
        assert quirks['memory'] is False
        assert quirks['index_overflow'] is True

    def test_unknown_quirk(self):
        with pytest.raises(ValueError):
            make_quirks({'wrapping': True})


class TestConfig:
    def test_defaults_match_classic_mode(self):
        config = Config()
        assert (config.display_width, config.display_height) == (64, 32)
        assert config.scale_factor == 20
        assert config.instructions_per_frame == 11

    def test_instructions_per_frame_is_at_least_one(self):
        assert Config(instructions_per_second=10, timer_hz=60).instructions_per_frame == 1

    @pytest.mark.parametrize("field", ['display_width', 'display_height', 'scale_factor',
                                       'instructions_per_second', 'timer_hz'])
    def test_validate_rejects_non_positive(self, field):
        with pytest.raises(ValueError):
            Config(**{field: 0}).validate()

    def test_validate_fills_missing_quirks(self):
        config = Config(quirks={'logic': True}).validate()
        assert config.quirks['logic'] is True
        assert set(config.quirks) == set(DEFAULT_QUIRKS)


def test_color_conversion():
    assert color_to_hex(0xFFFFFFFF) == '#ffffff'
    assert color_to_hex(0x12345600) == '#123456'
    assert color_to_rgb(0x12345678) == (0x12, 0x34, 0x56)
