from typing import Final, Optional

import pygame
from logger import log as _log
from pychip8.scheduler import InputFrame
from pychip8.state import KEY_COUNT
from util.config import DEFAULT_CONFIG, KEYPAD_KEYS


def key_from_name(name: str) -> Optional[int]:
    """Resolve a config key name ("Q", "1", "SPACE", "ENTER") to a pygame key constant."""
    py_key_name = name.strip()
    if py_key_name.upper() == "ENTER":
        py_key_name = "RETURN"
    py_key_name = py_key_name.lower() if len(py_key_name) == 1 else py_key_name.upper()
    return getattr(pygame, f"K_{py_key_name}", None)


class Control(object):
    """
    Keyboard state for the 16-key hex keypad.

    Feed it pygame events with ``update``; ``poll`` drains the pygame event queue
    itself and returns the frame's keypad snapshot plus pause/quit requests.
    """

    COMMANDS: Final[tuple[str, ...]] = ("PAUSE", "QUIT")

    def __init__(self, keyboard: Optional[dict[str, str]] = None) -> None:
        self.KEY_MAPPING: dict[int, int] = {}
        self.COMMAND_MAPPING: dict[int, str] = {}
        self._build_key_mapping(keyboard if keyboard is not None else DEFAULT_CONFIG["keyboard"])

        self.state: list[bool] = [False] * KEY_COUNT
        self._prev_state: list[bool] = self.state.copy()
        self._toggle_pause: bool = False
        self._quit: bool = False

    def _build_key_mapping(self, cfg_map: dict[str, str]) -> None:
        for name in KEYPAD_KEYS + self.COMMANDS:
            key_name = cfg_map.get(name, DEFAULT_CONFIG["keyboard"][name])
            py_key = key_from_name(key_name)
            if py_key is None:
                _log.warning(f"Invalid key '{key_name}' in config for {name}")
                continue

            if name in self.COMMANDS:
                self.COMMAND_MAPPING[py_key] = name
            else:
                self.KEY_MAPPING[py_key] = int(name, 16)

    def update(self, events: list[pygame.event.Event]) -> None:
        """Update keypad state based on pygame events"""
        self._prev_state = self.state.copy()

        for event in events:
            match event.type:
                case pygame.QUIT:
                    self._quit = True
                case pygame.KEYDOWN:
                    if event.key in self.KEY_MAPPING:
                        self.state[self.KEY_MAPPING[event.key]] = True
                    match self.COMMAND_MAPPING.get(event.key):
                        case "PAUSE":
                            self._toggle_pause = not self._toggle_pause
                        case "QUIT":
                            self._quit = True
                case pygame.KEYUP:
                    if event.key in self.KEY_MAPPING:
                        self.state[self.KEY_MAPPING[event.key]] = False
                case pygame.WINDOWFOCUSLOST:
                    self.reset()

    def poll(self, events: Optional[list[pygame.event.Event]] = None) -> InputFrame:
        self.update(pygame.event.get() if events is None else events)

        frame = InputFrame(keypad=self.state.copy(), toggle_pause=self._toggle_pause, quit=self._quit)
        self._toggle_pause = False
        self._quit = False
        return frame

    def reset(self) -> None:
        """Release every key"""
        for k in range(KEY_COUNT):
            self.state[k] = False

    def pressed(self, key: int) -> bool:
        return self.state[key]

    def just_pressed(self, key: int) -> bool:
        """Check if a key went down since the previous update"""
        return self.state[key] and not self._prev_state[key]

    def just_released(self, key: int) -> bool:
        return not self.state[key] and self._prev_state[key]
