from dataclasses import dataclass, field
from enum import Enum
from typing import Final, List

import numpy as np
from numpy.typing import NDArray
from returns.result import Failure, Result, Success

from pychip8.errors import RomLoadError, StackOverflow, StackUnderflow

MEMORY_SIZE: Final[int] = 0x1000
ADDRESS_MASK: Final[int] = MEMORY_SIZE - 1
ENTRY_POINT: Final[int] = 0x200
MAX_PROGRAM_SIZE: Final[int] = MEMORY_SIZE - ENTRY_POINT

SCREEN_WIDTH: Final[int] = 64
SCREEN_HEIGHT: Final[int] = 32

REGISTER_COUNT: Final[int] = 16
KEY_COUNT: Final[int] = 16
STACK_DEPTH: Final[int] = 12
FLAG: Final[int] = 0xF  # VF

FONT_ADDRESS: Final[int] = 0x000
GLYPH_SIZE: Final[int] = 5
FONT: Final[bytes] = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


class RunState(Enum):
    Running = 0
    Paused = 1
    Halted = 2


class Stack:
    """Fixed-capacity return address stack.

    push/pop never raise; they hand back a ``Result`` so the caller decides
    how a bad program is reported.
    """

    def __init__(self, capacity: int = STACK_DEPTH) -> None:
        self.capacity: Final[int] = capacity
        self._slots: List[int] = [0] * capacity
        self._depth: int = 0

    def __len__(self) -> int:
        return self._depth

    def __repr__(self) -> str:
        frames = ", ".join(f"0x{addr:03X}" for addr in self._slots[: self._depth])
        return f"<Stack depth={self._depth}/{self.capacity} [{frames}]>"

    @property
    def depth(self) -> int:
        return self._depth

    def peek(self) -> Result[int, StackUnderflow]:
        if self._depth == 0:
            return Failure(StackUnderflow("stack is empty"))
        return Success(self._slots[self._depth - 1])

    def push(self, address: int) -> Result[int, StackOverflow]:
        """Push a return address; succeeds with the new depth."""
        if self._depth >= self.capacity:
            return Failure(StackOverflow(f"call nesting exceeds {self.capacity} levels (return 0x{address:03X})"))
        self._slots[self._depth] = address & 0xFFFF
        self._depth += 1
        return Success(self._depth)

    def pop(self) -> Result[int, StackUnderflow]:
        """Pop the most recent return address."""
        if self._depth == 0:
            return Failure(StackUnderflow("return executed with an empty stack"))
        self._depth -= 1
        return Success(self._slots[self._depth])

    def clear(self) -> None:
        self._slots = [0] * self.capacity
        self._depth = 0


@dataclass
class Architecture:
    V: NDArray[np.uint8] = field(default_factory=lambda: np.zeros(REGISTER_COUNT, dtype=np.uint8))
    I: int = 0
    ProgramCounter: int = ENTRY_POINT
    stack: Stack = field(default_factory=Stack)


class VMState:
    """Everything the machine owns: memory, registers, stack, display, keypad and timers."""

    def __init__(self, program: bytes = b"") -> None:
        if len(program) > MAX_PROGRAM_SIZE:
            raise RomLoadError(f"Program is too big! Size: {len(program)} bytes, max allowed: {MAX_PROGRAM_SIZE}")

        self.memory: NDArray[np.uint8] = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        self.memory[FONT_ADDRESS : FONT_ADDRESS + len(FONT)] = np.frombuffer(FONT, dtype=np.uint8)
        if program:
            self.memory[ENTRY_POINT : ENTRY_POINT + len(program)] = np.frombuffer(bytes(program), dtype=np.uint8)

        self.Architecture: Architecture = Architecture()
        self.display: NDArray[np.bool_] = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=np.bool_)
        self.keypad: NDArray[np.bool_] = np.zeros(KEY_COUNT, dtype=np.bool_)
        self.delay_timer: int = 0
        self.sound_timer: int = 0
        self.run_state: RunState = RunState.Running

    def __repr__(self) -> str:
        return (
            f"<VMState PC=0x{self.PC:03X} I=0x{self.I:03X} "
            f"V=[{' '.join(f'{int(v):02X}' for v in self.V)}] "
            f"stack={len(self.stack)} DT={self.delay_timer} ST={self.sound_timer} {self.run_state.name}>"
        )

    # shorthands used all over the executor
    @property
    def V(self) -> NDArray[np.uint8]:
        return self.Architecture.V

    @property
    def I(self) -> int:
        return self.Architecture.I

    @I.setter
    def I(self, value: int) -> None:
        self.Architecture.I = value & 0xFFFF

    @property
    def PC(self) -> int:
        return self.Architecture.ProgramCounter

    @PC.setter
    def PC(self, value: int) -> None:
        self.Architecture.ProgramCounter = value & ADDRESS_MASK

    @property
    def stack(self) -> Stack:
        return self.Architecture.stack

    def read(self, address: int) -> int:
        return int(self.memory[address & ADDRESS_MASK])

    def write(self, address: int, value: int) -> None:
        self.memory[address & ADDRESS_MASK] = value & 0xFF

    def set_keypad(self, keys) -> None:
        """Copy a 16-entry snapshot of the logical keypad."""
        snapshot = np.asarray(keys, dtype=np.bool_)
        if snapshot.shape != (KEY_COUNT,):
            raise ValueError(f"keypad snapshot must have {KEY_COUNT} entries, got shape {snapshot.shape}")
        self.keypad[:] = snapshot
