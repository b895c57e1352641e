"""
tkinter front end: renderer, input source and audio source for a Chip8.

The window owns the driver loop. Every frame it runs a batch of
instructions, ticks the timers once, redraws if the display changed and
rings the bell when the sound timer becomes active.
"""

import logging
import tkinter as tk
from tkinter import Canvas
from typing import Optional

from .config import Config, color_to_hex
from .errors import ExecutionError
from .machine import Chip8, State

logger = logging.getLogger(__name__)

# CHIP-8 keypad mapping to keyboard keys
# Original CHIP-8 keypad:     Modern keyboard mapping:
# 1 2 3 C                     1 2 3 4
# 4 5 6 D          =>         Q W E R
# 7 8 9 E                     A S D F
# A 0 B F                     Z X C V
KEY_MAP = {
    '1': 0x1, '2': 0x2, '3': 0x3, '4': 0xC,
    'q': 0x4, 'w': 0x5, 'e': 0x6, 'r': 0xD,
    'a': 0x7, 's': 0x8, 'd': 0x9, 'f': 0xE,
    'z': 0xA, 'x': 0x0, 'c': 0xB, 'v': 0xF
}

QUIT_KEY = 'escape'
PAUSE_KEY = 'space'


class Chip8Window:
    """Interactive window around a loaded machine"""

    def __init__(self, machine: Chip8, config: Optional[Config] = None, title: str = "CHIP-8"):
        self.machine = machine
        self.config = config or machine.config
        self.title = title
        self.error: Optional[ExecutionError] = None
        self._closing = False
        self._sounding = False

        self.root = tk.Tk()
        self.root.title(title)
        self.root.resizable(False, False)

        scale = self.config.scale_factor
        self.fg = color_to_hex(self.config.fg_color)
        self.bg = color_to_hex(self.config.bg_color)
        self.canvas = Canvas(self.root,
                             width=self.config.display_width * scale,
                             height=self.config.display_height * scale,
                             bg=self.bg, highlightthickness=0)
        self.canvas.pack()

        self.root.bind('<KeyPress>', self._key_press)
        self.root.bind('<KeyRelease>', self._key_release)
        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self.root.focus_set()

    def _key_press(self, event):
        if self._closing:
            return
        key = event.keysym.lower()
        if key in KEY_MAP:
            self.machine.set_key(KEY_MAP[key], True)
        elif key == QUIT_KEY:
            self.close()
        elif key == PAUSE_KEY and self.error is None:
            self.machine.toggle_pause()
            logger.info("===== %s =====", "PAUSED" if self.machine.state == State.PAUSED else "RESUMED")

    def _key_release(self, event):
        if self._closing:
            return
        key = event.keysym.lower()
        if key in KEY_MAP:
            self.machine.set_key(KEY_MAP[key], False)

    def close(self):
        """Safely close the window and stop all callbacks"""
        if self._closing:
            return
        self._closing = True
        self.machine.quit()
        self.root.quit()
        self.root.destroy()

    def _freeze(self, error: ExecutionError):
        """Keep the last frame on screen and stop executing"""
        self.error = error
        logger.error("Execution halted: %s", error)
        self.machine.pause()
        self.root.title(f"{self.title} - halted: {error}")

    def _run_frame(self):
        machine = self.machine
        if machine.state != State.RUNNING:
            return
        try:
            for _ in range(self.config.instructions_per_frame):
                machine.step()
        except ExecutionError as e:
            self._freeze(e)
            return
        machine.tick_timers()

    def _update_sound(self):
        if self.machine.sound_active and not self._sounding:
            self.root.bell()
        self._sounding = self.machine.sound_active

    def redraw(self):
        self.canvas.delete("all")
        scale = self.config.scale_factor
        display = self.machine.display
        for y, x in zip(*display.nonzero()):
            x1 = int(x) * scale
            y1 = int(y) * scale
            self.canvas.create_rectangle(x1, y1, x1 + scale, y1 + scale, fill=self.fg, outline=self.fg)
        self.machine.clear_display_changed()

    def _update(self):
        if self._closing:
            return
        try:
            self._run_frame()
            if self.machine.display_changed:
                self.redraw()
            self._update_sound()
            if self.machine.state == State.QUIT:
                self.close()
                return
            self.root.after(max(1, 1000 // self.config.timer_hz), self._update)
        except tk.TclError:
            # Window was destroyed, stop callbacks
            self._closing = True

    def mainloop(self):
        self.redraw()
        self._update()
        try:
            self.root.mainloop()
        finally:
            self._closing = True
