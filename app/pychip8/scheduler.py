import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

import numpy as np
from numpy.typing import NDArray

from pychip8.emulator import Emulator
from pychip8.errors import EmulatorError
from pychip8.state import RunState
from pychip8.util.timer import FrameTimer

_logger = logging.getLogger("PyCHIP8.scheduler")

DEFAULT_INSTRUCTIONS_PER_SECOND = 500
DEFAULT_TICK_RATE = 60


@dataclass
class InputFrame:
    """What the host saw since the last frame."""

    keypad: Optional[Sequence[bool]] = None
    toggle_pause: bool = False
    quit: bool = False


class InputSource(Protocol):
    def poll(self) -> InputFrame: ...


Renderer = Callable[[NDArray[np.bool_]], None]


class Scheduler:
    """
    Drives the emulator in fixed-rate frames.

    One frame: take the keypad snapshot and pause/quit signals, run a batch of
    ``instructions_per_second // tick_rate`` instructions, tick the timers once,
    hand the display to the renderer and sleep out the rest of the frame.

    Signals are only looked at between frames, so a quit raised mid-batch lets
    the batch finish first.
    """

    def __init__(
        self,
        emulator: Emulator,
        instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND,
        tick_rate: int = DEFAULT_TICK_RATE,
        input_source: Optional[InputSource] = None,
        renderer: Optional[Renderer] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if tick_rate <= 0:
            raise ValueError("tick_rate must be a positive integer")
        if instructions_per_second < 0:
            raise ValueError("instructions_per_second must not be negative")

        self.emulator: Emulator = emulator
        self.instructions_per_second: int = instructions_per_second
        self.tick_rate: int = tick_rate
        self.input_source: Optional[InputSource] = input_source
        self.renderer: Optional[Renderer] = renderer
        self._sleep = sleep
        self._frame_timer: FrameTimer = FrameTimer(1.0 / tick_rate, clock)
        self._pause_requested: bool = False
        self._quit_requested: bool = False
        self.frame_count: int = 0

    @property
    def batch_size(self) -> int:
        return self.instructions_per_second // self.tick_rate

    @property
    def frame_budget(self) -> float:
        return 1.0 / self.tick_rate

    @property
    def run_state(self) -> RunState:
        return self.emulator.state.run_state

    @run_state.setter
    def run_state(self, value: RunState) -> None:
        self.emulator.state.run_state = value

    def request_pause_toggle(self) -> None:
        self._pause_requested = not self._pause_requested

    def request_quit(self) -> None:
        self._quit_requested = True

    def _drain_input(self) -> None:
        if self.input_source is None:
            return
        frame = self.input_source.poll()
        if frame.keypad is not None:
            self.emulator.Input(frame.keypad)
        if frame.toggle_pause:
            self.request_pause_toggle()
        if frame.quit:
            self.request_quit()

    def _apply_signals(self) -> None:
        if self._quit_requested:
            self._quit_requested = False
            self._pause_requested = False
            if self.run_state is not RunState.Halted:
                _logger.info("Quit requested, halting")
            self.run_state = RunState.Halted
            return

        if self._pause_requested:
            self._pause_requested = False
            match self.run_state:
                case RunState.Running:
                    self.run_state = RunState.Paused
                    _logger.info("====PAUSED====")
                case RunState.Paused:
                    self.run_state = RunState.Running
                    _logger.info("Resumed")

    def run_frame(self) -> None:
        self._frame_timer.start()

        self._drain_input()
        self._apply_signals()
        if self.run_state is RunState.Halted:
            return

        if self.run_state is RunState.Running:
            try:
                self.emulator.run(self.batch_size)
            except EmulatorError:
                self.run_state = RunState.Halted
                raise
            self.emulator.tick_timers()

        if self.renderer is not None:
            self.renderer(self.emulator.state.display)

        self.frame_count += 1
        self._sleep(self._frame_timer.remaining())

    def run(self, max_frames: Optional[int] = None) -> None:
        """Run frames until halted, or until ``max_frames`` frames have been run."""
        _logger.info(f"Running at {self.instructions_per_second} instructions/s, {self.tick_rate} Hz ({self.batch_size} per frame)")
        frames = 0
        while self.run_state is not RunState.Halted:
            if max_frames is not None and frames >= max_frames:
                break
            self.run_frame()
            frames += 1
