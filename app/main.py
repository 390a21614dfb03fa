#!/usr/bin/env python3
import platform
import sys
from pathlib import Path
from types import TracebackType
from typing import Optional, Tuple, Type, TypeVar

import numpy as np
import pygame
from __version__ import __version_string__ as __version__
from backend.Beeper import Beeper
from backend.Control import Control
from logger import console, debug_mode
from logger import log as _log
from numpy.typing import NDArray
from objects.RenderSprite import RenderSprite
from pychip8.cartridge import Rom
from pychip8.decoder import Instruction
from pychip8.emulator import Emulator
from pychip8.errors import EmulatorError
from pychip8.scheduler import Scheduler
from pychip8.state import SCREEN_HEIGHT, SCREEN_WIDTH, RunState
from resources import icon_path
from returns.result import Failure, Result
from rich.traceback import install
from util.config import load_config, parse_color

TITLE: str = "PyCHIP8 Emulator"

# Resources (initialized in main, cleaned up globally)
beeper: Optional[Beeper] = None

E = TypeVar("E", bound=BaseException)


def _extract_exc_info(e: E) -> Tuple[Type[E], E, Optional[TracebackType]]:
    return (type(e), e, e.__traceback__)


def _platform_safe_cleanup() -> None:
    global beeper
    _log.info("Starting cleanup")

    if beeper is not None:
        try:
            beeper.close()
            _log.info("Beeper closed")
        except pygame.error as e:
            _log.error(f"Beeper cleanup failed: {e}", exc_info=_extract_exc_info(e))

    beeper = None


def _rom_path_from_argv(argv: list[str]) -> Optional[Path]:
    args = [a for a in argv[1:] if not a.startswith("--")]
    if not args:
        return None
    return Path(args[-1]).resolve()


def main() -> int:
    global beeper

    install(console=console)
    cfg = load_config()
    _log.info(f"Starting PyCHIP8 Emulator {__version__}")

    rom_path = _rom_path_from_argv(sys.argv)
    if rom_path is None:
        _log.error("Usage: python app/main.py [--debug] <rom>")
        return 1

    result: Result[Rom, str] = Rom.from_file(rom_path)
    if isinstance(result, Failure):
        _log.error(result.failure())
        return 1

    emulator = Emulator()
    emulator.Load(result.unwrap())
    emulator.debug.Logging = debug_mode
    try:
        emulator.Reset()
    except EmulatorError as e:
        _log.error(f"Emulator error: {e}", exc_info=_extract_exc_info(e))
        return 1
    _log.info(f"Loaded: {rom_path.name}")

    @emulator.on("tracelogger")
    def _(line: str) -> None:
        _log.debug(line)

    @emulator.on("unknown_opcode")
    def _(address: int, inst: Instruction) -> None:
        _log.warning(f"Unimplemented opcode {inst.opcode:04X} at {address:04X}")

    general = cfg["general"]
    SCALE: int = general["scale"]
    fg = parse_color(cfg["display"]["fg_color"])
    bg = parse_color(cfg["display"]["bg_color"])

    _log.info(f"Starting pygame community edition {pygame.__version__}")
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * SCALE, SCREEN_HEIGHT * SCALE))
    pygame.display.set_caption(TITLE)
    try:
        pygame.display.set_icon(pygame.image.load(icon_path))
    except (pygame.error, FileNotFoundError) as e:
        _log.debug(f"No window icon: {e}")

    sprite = RenderSprite(screen, fg=fg[:3], bg=bg[:3], scale=SCALE, pixel_outlines=general["pixel_outlines"])
    user_input = Control(cfg["keyboard"])
    beeper = Beeper(cfg["sound"]["frequency"], cfg["sound"]["volume"], enable=cfg["sound"]["enable"])

    oldT = ""

    def render(display: NDArray[np.bool_]) -> None:
        nonlocal oldT
        sprite.draw(display)
        beeper.update(emulator.sound_active and emulator.state.run_state is RunState.Running)  # type: ignore

        title = f"{TITLE} [PAUSED]" if emulator.state.run_state is RunState.Paused else TITLE
        if title != oldT:
            pygame.display.set_caption(title)
            oldT = title

    scheduler = Scheduler(
        emulator,
        instructions_per_second=general["instructions_per_second"],
        tick_rate=general["tick_rate"],
        input_source=user_input,
        renderer=render,
    )

    try:
        scheduler.run()
    except EmulatorError as e:
        _log.error(f"Emulator error: {e}", exc_info=_extract_exc_info(e))
        if debug_mode:
            for line in emulator.tracelog:
                _log.debug(line)
        return 1

    _log.info(f"Halted after {emulator.cycles} instructions")
    return 0


if __name__ == "__main__":
    if tuple(map(int, platform.python_version_tuple()[:2])) < (3, 11):
        raise RuntimeError("Python 3.11 or higher is required to run PyCHIP8.")

    exit_code = 1
    try:
        exit_code = main()
    except KeyboardInterrupt:
        _log.info("Interrupted by user (Ctrl+C)")
        exit_code = 0
    except Exception as e:
        _log.error("Unhandled exception", exc_info=_extract_exc_info(e))
    finally:
        _platform_safe_cleanup()
        pygame.quit()
        _log.info("Pygame: Shutting down")
        _log.info("PyCHIP8 Emulator: Shutdown complete")
    sys.exit(exit_code)
