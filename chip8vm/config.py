"""
Machine and front end configuration.

Quirks are the historically inconsistent corners of the instruction set.
Each one is a named on/off flag so a ROM can be run against whichever
interpreter it was written for.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

# Display defaults (classic 64x32 mode)
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32

DEFAULT_QUIRKS = {
    'index_overflow': True,  # Fx1E sets VF when I + Vx passes 0xFFF
    'shifting': False,       # 8xy6/8xyE shift vY into vX (False = shift vX in place)
    'memory': True,          # Fx55/Fx65 increment I register
    'logic': False,          # 8xy1/8xy2/8xy3 reset vF to 0
    'jumping': False,        # Bnnn uses vX instead of v0
    'byte_carry': True,      # 7xkk sets vF to the carry out
}


def make_quirks(overrides: Optional[Dict[str, bool]] = None) -> Dict[str, bool]:
    """Return a full quirks dict with overrides applied on top of the defaults"""
    quirks = dict(DEFAULT_QUIRKS)
    for name, enabled in (overrides or {}).items():
        if name not in DEFAULT_QUIRKS:
            raise ValueError(f"Unknown quirk: {name!r} (known: {', '.join(sorted(DEFAULT_QUIRKS))})")
        quirks[name] = bool(enabled)
    return quirks


def color_to_hex(rgba: int) -> str:
    """Convert a packed 0xRRGGBBAA color to a '#rrggbb' string (alpha is dropped)"""
    r = (rgba >> 24) & 0xFF
    g = (rgba >> 16) & 0xFF
    b = (rgba >> 8) & 0xFF
    return f"#{r:02x}{g:02x}{b:02x}"


def color_to_rgb(rgba: int):
    return ((rgba >> 24) & 0xFF, (rgba >> 16) & 0xFF, (rgba >> 8) & 0xFF)


@dataclass
class Config:
    """Everything the engine and its front end need besides the ROM itself"""
    display_width: int = DISPLAY_WIDTH
    display_height: int = DISPLAY_HEIGHT
    fg_color: int = 0xFFFFFFFF
    bg_color: int = 0x00000000
    scale_factor: int = 20
    instructions_per_second: int = 700
    timer_hz: int = 60
    quirks: Dict[str, bool] = field(default_factory=make_quirks)

    @property
    def instructions_per_frame(self) -> int:
        return max(1, self.instructions_per_second // self.timer_hz)

    def validate(self):
        for name in ('display_width', 'display_height', 'scale_factor',
                     'instructions_per_second', 'timer_hz'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        self.quirks = make_quirks(self.quirks)
        return self
