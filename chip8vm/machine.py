"""
CHIP-8 execution engine.

A Chip8 instance owns every piece of machine state (memory, registers,
stack, timers, display, keypad) and exposes a single repeatable step()
operation. The driver calls step() at the instruction rate and
tick_timers() at 60 Hz, polls display_changed to decide whether to redraw,
and reads sound_active to decide whether a tone should be audible.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .config import Config
from .decoder import Instruction, Op, decode
from .errors import ExecutionError, StackOverflow, StackUnderflow
from .loader import (FONT, FONT_GLYPH_SIZE, FONT_SIZE, FONT_START, MEMORY_SIZE,
                     PROGRAM_START, ImageData, load_image, read_image)

logger = logging.getLogger(__name__)

# CHIP-8 System Constants
REGISTER_COUNT = 16
STACK_SIZE = 16
KEYPAD_SIZE = 16
ADDRESS_MASK = MEMORY_SIZE - 1
FLAG = 0xF

# Instructions logged at DEBUG level after a reset
TRACE_LIMIT = 20


class State(Enum):
    RUNNING = 'running'
    PAUSED = 'paused'
    QUIT = 'quit'


class Chip8:
    """
    Single-instance CHIP-8 machine.

    State transitions (pause/resume/quit) belong to the collaborator that
    polls input; the engine only ever enters its own key-wait sub-state.
    """

    def __init__(self, config: Optional[Config] = None, seed: Optional[int] = None):
        self.config = (config or Config()).validate()
        self.quirks = self.config.quirks
        self.rng = np.random.default_rng(seed)
        self.reset()

    def reset(self):
        """Reset the machine to its power-on state (font loaded, no ROM)"""
        self.memory = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        self.display = np.zeros((self.config.display_height, self.config.display_width), dtype=bool)
        self.display_changed = False
        self.registers = np.zeros(REGISTER_COUNT, dtype=np.uint8)
        self.index_register = 0
        self.program_counter = PROGRAM_START
        self.stack_pointer = 0
        self.stack = np.zeros(STACK_SIZE, dtype=np.uint16)
        self.delay_timer = 0
        self.sound_timer = 0
        self.keypad = np.zeros(KEYPAD_SIZE, dtype=bool)
        self.awaiting_key: Optional[int] = None
        self._keys_at_last_check = np.zeros(KEYPAD_SIZE, dtype=bool)
        self.state = State.RUNNING
        self.cycles = 0
        self.rom_name: Optional[str] = None
        self._loaded = False

        self.memory[FONT_START:FONT_START + FONT_SIZE] = FONT

    def load_rom(self, rom: Union[str, Path, ImageData]):
        """Load a ROM from a path or raw bytes. Allowed once per reset()."""
        if self._loaded:
            raise RuntimeError("A ROM is already loaded; call reset() first")

        if isinstance(rom, (str, Path)):
            self.rom_name = str(rom)
            rom = read_image(rom)

        load_image(self.memory, rom)
        self.program_counter = PROGRAM_START
        self.state = State.RUNNING
        self._loaded = True

    # ------------------------------------------------------------------
    # State machine (driven by the input collaborator)
    # ------------------------------------------------------------------

    def pause(self):
        if self.state == State.RUNNING:
            self.state = State.PAUSED

    def resume(self):
        if self.state == State.PAUSED:
            self.state = State.RUNNING

    def toggle_pause(self):
        if self.state == State.RUNNING:
            self.pause()
        else:
            self.resume()

    def quit(self):
        self.state = State.QUIT

    @property
    def running(self) -> bool:
        return self.state == State.RUNNING

    # ------------------------------------------------------------------
    # Collaborator-facing accessors
    # ------------------------------------------------------------------

    def set_key(self, key: int, pressed: bool):
        """Set key state (0-F)"""
        if not 0 <= key < KEYPAD_SIZE:
            raise ValueError(f"Key out of range: {key}")
        self.keypad[key] = bool(pressed)

    @property
    def sound_active(self) -> bool:
        return self.sound_timer > 0

    def get_display(self) -> np.ndarray:
        """Get current display state as 2D array"""
        return self.display.copy()

    def clear_display_changed(self):
        self.display_changed = False

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def tick_timers(self):
        """Decrement both timers by one, never below zero. Called at 60 Hz."""
        if self.state != State.RUNNING:
            return
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def run(self, cycles: int, timer_interval: Optional[int] = None):
        """Run emulator for specified number of cycles, ticking timers every timer_interval steps"""
        interval = timer_interval or self.config.instructions_per_frame
        for cycle in range(cycles):
            if self.state != State.RUNNING:
                break
            self.step()
            if (cycle + 1) % interval == 0:
                self.tick_timers()

    def step(self):
        """Execute one instruction"""
        if self.state != State.RUNNING:
            return

        if self.awaiting_key is not None:
            self._poll_key_wait()
            return

        pc = self.program_counter
        word = (int(self.memory[pc & ADDRESS_MASK]) << 8) | int(self.memory[(pc + 1) & ADDRESS_MASK])
        instruction = decode(word, pc)

        if self.cycles < TRACE_LIMIT:
            logger.debug("Executing: 0x%04X at PC=0x%03X (%s)", word, pc, instruction.kind.name)

        self.program_counter = (pc + 2) & ADDRESS_MASK
        try:
            self._execute(instruction, pc)
        except ExecutionError:
            self.program_counter = pc
            raise
        self.cycles += 1

    def _poll_key_wait(self):
        """Resolve the Fx0A wait if a key went down since the last check"""
        newly_pressed = np.flatnonzero(self.keypad & ~self._keys_at_last_check)
        self._keys_at_last_check = self.keypad.copy()
        if len(newly_pressed) == 0:
            return

        key = int(newly_pressed[0])
        self.registers[self.awaiting_key] = key
        logger.debug("Key 0x%X pressed, stored in V%X", key, self.awaiting_key)
        self.awaiting_key = None
        self.program_counter = (self.program_counter + 2) & ADDRESS_MASK
        self.cycles += 1

    def _skip_if(self, condition: bool):
        if condition:
            self.program_counter = (self.program_counter + 2) & ADDRESS_MASK

    def _execute(self, ins: Instruction, address: int):
        """Execute a decoded instruction. PC already points past it."""
        kind = ins.kind
        x, y = ins.x, ins.y
        vx = int(self.registers[x])
        vy = int(self.registers[y])

        if kind == Op.CLS:
            self.display.fill(False)
            self.display_changed = True

        elif kind == Op.RET:
            if self.stack_pointer == 0:
                raise StackUnderflow(address)
            self.stack_pointer -= 1
            self.program_counter = int(self.stack[self.stack_pointer])

        elif kind == Op.SYS:
            # Machine code routines are ignored, as in every interpreter since the VIP
            pass

        elif kind == Op.JP:
            self.program_counter = ins.nnn

        elif kind == Op.CALL:
            if self.stack_pointer >= STACK_SIZE:
                raise StackOverflow(address, self.stack_pointer)
            self.stack[self.stack_pointer] = self.program_counter
            self.stack_pointer += 1
            self.program_counter = ins.nnn

        elif kind == Op.SE_BYTE:
            self._skip_if(vx == ins.kk)

        elif kind == Op.SNE_BYTE:
            self._skip_if(vx != ins.kk)

        elif kind == Op.SE_REG:
            self._skip_if(vx == vy)

        elif kind == Op.SNE_REG:
            self._skip_if(vx != vy)

        elif kind == Op.LD_BYTE:
            self.registers[x] = ins.kk

        elif kind == Op.ADD_BYTE:
            result = vx + ins.kk
            self.registers[x] = result & 0xFF
            if self.quirks['byte_carry']:
                self.registers[FLAG] = 1 if result > 0xFF else 0

        elif kind in (Op.LD_REG, Op.OR, Op.AND, Op.XOR, Op.ADD_REG,
                      Op.SUB, Op.SHR, Op.SUBN, Op.SHL):
            self._execute_alu(kind, x, vx, vy)

        elif kind == Op.LD_I:
            self.index_register = ins.nnn

        elif kind == Op.JP_V0:
            offset_reg = (ins.nnn & 0xF00) >> 8 if self.quirks['jumping'] else 0
            self.program_counter = (ins.nnn + int(self.registers[offset_reg])) & ADDRESS_MASK

        elif kind == Op.RND:
            self.registers[x] = int(self.rng.integers(0, 256)) & ins.kk

        elif kind == Op.DRW:
            self._draw_sprite(vx, vy, ins.n)

        elif kind == Op.SKP:
            self._skip_if(bool(self.keypad[vx & 0xF]))

        elif kind == Op.SKNP:
            self._skip_if(not self.keypad[vx & 0xF])

        elif kind == Op.LD_VX_DT:
            self.registers[x] = self.delay_timer

        elif kind == Op.LD_KEY:
            # Stay on this instruction until a key goes down; see _poll_key_wait
            self.awaiting_key = x
            self._keys_at_last_check = self.keypad.copy()
            self.program_counter = address
            logger.debug("Waiting for key into V%X at PC=0x%03X", x, address)

        elif kind == Op.LD_DT_VX:
            self.delay_timer = vx

        elif kind == Op.LD_ST_VX:
            self.sound_timer = vx

        elif kind == Op.ADD_I:
            total = self.index_register + vx
            self.index_register = total & 0xFFFF
            if self.quirks['index_overflow']:
                self.registers[FLAG] = 1 if total > ADDRESS_MASK else 0

        elif kind == Op.LD_FONT:
            self.index_register = FONT_START + (vx & 0xF) * FONT_GLYPH_SIZE

        elif kind == Op.BCD:
            i = self.index_register
            self.memory[i & ADDRESS_MASK] = vx // 100
            self.memory[(i + 1) & ADDRESS_MASK] = (vx // 10) % 10
            self.memory[(i + 2) & ADDRESS_MASK] = vx % 10

        elif kind == Op.STORE_REGS:
            for r in range(x + 1):
                self.memory[(self.index_register + r) & ADDRESS_MASK] = self.registers[r]
            if self.quirks['memory']:
                self.index_register = (self.index_register + x + 1) & 0xFFFF

        elif kind == Op.LOAD_REGS:
            for r in range(x + 1):
                self.registers[r] = self.memory[(self.index_register + r) & ADDRESS_MASK]
            if self.quirks['memory']:
                self.index_register = (self.index_register + x + 1) & 0xFFFF

        else:
            raise AssertionError(f"Decoded instruction has no handler: {kind}")

    def _execute_alu(self, kind: Op, x: int, vx: int, vy: int):
        """8xyN register operations. The result is written before VF."""
        if kind == Op.LD_REG:
            self.registers[x] = vy

        elif kind in (Op.OR, Op.AND, Op.XOR):
            if kind == Op.OR:
                self.registers[x] = vx | vy
            elif kind == Op.AND:
                self.registers[x] = vx & vy
            else:
                self.registers[x] = vx ^ vy
            if self.quirks['logic']:
                self.registers[FLAG] = 0

        elif kind == Op.ADD_REG:
            result = vx + vy
            self.registers[x] = result & 0xFF
            self.registers[FLAG] = 1 if result > 0xFF else 0

        elif kind == Op.SUB:
            self.registers[x] = (vx - vy) & 0xFF
            self.registers[FLAG] = 1 if vx >= vy else 0  # NOT borrow

        elif kind == Op.SUBN:
            self.registers[x] = (vy - vx) & 0xFF
            self.registers[FLAG] = 1 if vy >= vx else 0  # NOT borrow

        elif kind == Op.SHR:
            source = vy if self.quirks['shifting'] else vx
            self.registers[x] = source >> 1
            self.registers[FLAG] = source & 0x1

        elif kind == Op.SHL:
            source = vy if self.quirks['shifting'] else vx
            self.registers[x] = (source << 1) & 0xFF
            self.registers[FLAG] = (source >> 7) & 0x1

    def _draw_sprite(self, vx: int, vy: int, height: int):
        """XOR an 8 x height sprite from memory[I] onto the display at (vx, vy), wrapping at the edges"""
        rows, cols = self.display.shape
        x0 = vx % cols
        y0 = vy % rows
        collision = False
        toggled = False

        for row in range(height):
            sprite_byte = int(self.memory[(self.index_register + row) & ADDRESS_MASK])
            if sprite_byte == 0:
                continue
            pixel_y = (y0 + row) % rows
            for col in range(8):
                if sprite_byte & (0x80 >> col):
                    pixel_x = (x0 + col) % cols
                    if self.display[pixel_y, pixel_x]:
                        collision = True
                    self.display[pixel_y, pixel_x] ^= True
                    toggled = True

        self.registers[FLAG] = 1 if collision else 0
        if toggled:
            self.display_changed = True
