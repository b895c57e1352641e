#!/usr/bin/env python3
"""
Command line entry point.

Runs a ROM in a tkinter window, or headless for a fixed number of cycles
with an optional PNG screenshot of the final display.
"""

import argparse
import logging
from typing import Dict, List, Optional

from .config import DEFAULT_QUIRKS, Config, make_quirks
from .errors import ExecutionError, LoadError
from .machine import Chip8

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_EXECUTION_ERROR = 2


def parse_color(text: str) -> int:
    """Parse '#rrggbb', 'rrggbb' or 'rrggbbaa' into a packed 0xRRGGBBAA color"""
    value = text.strip().lstrip('#')
    if value.lower().startswith('0x'):
        value = value[2:]
    if len(value) == 6:
        value += 'ff'
    if len(value) != 8:
        raise argparse.ArgumentTypeError(f"Invalid color: {text!r}")
    try:
        return int(value, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid color: {text!r}") from None


def parse_quirk(text: str):
    """Parse NAME=on|off"""
    name, sep, flag = text.partition('=')
    flag = flag.strip().lower()
    if not sep or flag not in ('on', 'off', 'true', 'false', '1', '0'):
        raise argparse.ArgumentTypeError(f"Expected NAME=on|off, got {text!r}")
    if name not in DEFAULT_QUIRKS:
        raise argparse.ArgumentTypeError(
            f"Unknown quirk {name!r} (known: {', '.join(sorted(DEFAULT_QUIRKS))})")
    return name, flag in ('on', 'true', '1')


def positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='chip8vm',
        description='CHIP-8 virtual machine',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keypad:
  1 2 3 4    ->    1 2 3 C
  Q W E R    ->    4 5 6 D
  A S D F    ->    7 8 9 E
  Z X C V    ->    A 0 B F
Space pauses/resumes, Esc quits.
""")
    parser.add_argument('rom', help='ROM image to run')
    parser.add_argument('--scale', type=positive_int, default=20, help='Window scale factor (default: 20)')
    parser.add_argument('--fg', type=parse_color, default=0xFFFFFFFF, help='Foreground color, e.g. #ffffff')
    parser.add_argument('--bg', type=parse_color, default=0x00000000, help='Background color, e.g. #000000')
    parser.add_argument('--ips', type=positive_int, default=700, help='Instructions per second (default: 700)')
    parser.add_argument('--headless', type=positive_int, metavar='CYCLES',
                        help='Run CYCLES instructions without a window and print the final state')
    parser.add_argument('--screenshot', type=str, metavar='PATH',
                        help='Save the final display as a PNG (headless mode)')
    parser.add_argument('--seed', type=int, help='Seed for the random number instruction')
    parser.add_argument('--quirk', type=parse_quirk, action='append', default=[], metavar='NAME=on|off',
                        help=f"Toggle a compatibility quirk ({', '.join(sorted(DEFAULT_QUIRKS))})")
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', type=str, help='Also write log output to this file')
    return parser


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    if log_file:
        handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logging.getLogger().addHandler(handler)


def config_from_args(args: argparse.Namespace) -> Config:
    overrides: Dict[str, bool] = dict(args.quirk)
    return Config(
        fg_color=args.fg,
        bg_color=args.bg,
        scale_factor=args.scale,
        instructions_per_second=args.ips,
        quirks=make_quirks(overrides),
    ).validate()


def print_state(machine: Chip8):
    """Print the register file and the display as text"""
    print(f"PC: 0x{machine.program_counter:03X}  I: 0x{machine.index_register:03X}  "
          f"SP: {machine.stack_pointer}  DT: {machine.delay_timer}  ST: {machine.sound_timer}")
    print("V0-V7: " + ' '.join(f"{int(v):02X}" for v in machine.registers[:8]))
    print("V8-VF: " + ' '.join(f"{int(v):02X}" for v in machine.registers[8:]))
    print(f"Instructions executed: {machine.cycles}")
    print()
    for row in machine.display:
        print(''.join('██' if pixel else '  ' for pixel in row))


def run_headless(machine: Chip8, cycles: int, screenshot: Optional[str] = None) -> int:
    status = EXIT_OK
    try:
        machine.run(cycles)
    except ExecutionError as e:
        logger.error("Execution halted: %s", e)
        machine.quit()
        status = EXIT_EXECUTION_ERROR

    print_state(machine)

    if screenshot:
        from .screenshot import save_screenshot
        path = save_screenshot(machine.display, screenshot, scale=machine.config.scale_factor,
                               fg_color=machine.config.fg_color, bg_color=machine.config.bg_color)
        logger.info("Screenshot saved to %s", path)
    return status


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug, args.log_file)

    config = config_from_args(args)
    machine = Chip8(config, seed=args.seed)
    try:
        machine.load_rom(args.rom)
    except LoadError as e:
        logger.error("%s", e)
        return EXIT_LOAD_ERROR

    logger.info("Loaded ROM: %s", args.rom)
    if args.headless:
        return run_headless(machine, args.headless, args.screenshot)

    if args.screenshot:
        parser.error("--screenshot requires --headless")

    from .frontend import Chip8Window
    window = Chip8Window(machine, config, title=f"CHIP-8: {args.rom}")
    window.mainloop()
    return EXIT_EXECUTION_ERROR if window.error is not None else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
