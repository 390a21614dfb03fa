import logging
from collections import deque
from dataclasses import dataclass, field
from string import Template
from typing import Any, Callable, Dict, Final, Optional, Sequence

import numpy as np

from pychip8.cartridge import Rom
from pychip8.decoder import Instruction, decode, fetch
from pychip8.errors import EmulatorError
from pychip8.executor import Executor
from pychip8.state import VMState
from pychip8.timers import tick_timers
from pychip8.util.OpCodes import OpCodes

_logger = logging.getLogger("PyCHIP8.emulator")

# Template
TEMPLATE: Final[Template] = Template("${PC}: opcode: ${OP} | I: ${I} | V: ${V} | SP: ${SP} | ${DESC}")


@dataclass
class HaltOn:
    UnknownOpcode: bool = False


@dataclass
class Debug:
    Logging: bool = False
    HaltOn: HaltOn = field(default_factory=HaltOn)


class Emulator:
    """
    CHIP-8 virtual machine.

    Owns the machine state and the executor, and exposes an event registry so
    tracing and diagnostics can observe execution without touching dispatch.

    Events:
        decoded(address, instruction): after every fetch and decode
        tracelogger(line): formatted trace line, only while debug.Logging is on
        unknown_opcode(address, instruction): a word that matched no instruction
    """

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self.rom: Optional[Rom] = None
        self._rng: Optional[np.random.Generator] = rng
        self._events: Dict[str, deque[Callable[..., Any]]] = {}
        self.tracelog: deque[str] = deque(maxlen=2024)
        self.debug: Debug = Debug()
        self.state: VMState = VMState()
        self.executor: Executor = Executor(self.state, rng)
        self.cycles: int = 0

    def _tracelogger(self, address: int, inst: Instruction) -> None:
        s = self.state
        line = TEMPLATE.substitute(
            PC=f"{address:04X}",
            OP=f"{inst.opcode:04X}",
            I=f"{s.I:04X}",
            V=" ".join(f"{int(v):02X}" for v in s.V),
            SP=f"{len(s.stack):02d}",
            DESC=OpCodes.Describe(inst, s.V, s.I, s.keypad),
        )

        self.tracelog.append(line)

    def on(self, event_name: str):
        def decorator(func: Callable):
            self._events.setdefault(event_name, deque()).append(func)
            return func

        return decorator

    def _emit(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        """Emit an event to all registered callbacks."""
        callbacks = self._events.get(event_name)
        if not callbacks:
            return

        for callback in callbacks:
            if not callable(callback):
                raise EmulatorError(ValueError(f"Callback {callback} is not Callable"))
            callback(*args, **kwargs)

    def Load(self, rom: Rom) -> None:
        if self.rom is not None:
            raise EmulatorError(ValueError("Cannot load a program while another one is loaded"))
        self.rom = rom

    def Reset(self) -> None:
        """Rebuild the machine from the loaded program: font, program, zeroed registers, PC at 0x200."""
        if self.rom is None:
            raise EmulatorError(ValueError("load a program first and then reset the emulator"))

        _logger.info("Resetting emulator...")
        self.state = VMState(self.rom.to_bytes())
        self.executor = Executor(self.state, self._rng)
        self.tracelog.clear()
        self.cycles = 0

        _logger.debug(f"Program: {len(self.rom)} bytes, first words: [{', '.join(f'{b:02X}' for b in self.rom.data[:0x10])}]")

    def Input(self, keypad: Sequence[bool]) -> None:
        """Replace the keypad snapshot.

        Args:
            keypad: 16 booleans indexed by logical key 0x0-0xF (True = pressed).
        """
        try:
            self.state.set_keypad(keypad)
        except ValueError as e:
            raise EmulatorError(e)

    def step(self) -> Instruction:
        """Fetch, decode and execute one instruction."""
        s = self.state
        address = s.PC
        inst = decode(fetch(s))
        s.PC = address + 2

        self._emit("decoded", address, inst)
        if self.debug.Logging:
            self._tracelogger(address, inst)
            self._emit("tracelogger", self.tracelog[-1])

        if not self.executor.execute(inst):
            _logger.debug(f"Unknown opcode {inst.opcode:04X} at {address:04X}, ignored")
            self._emit("unknown_opcode", address, inst)
            if self.debug.HaltOn.UnknownOpcode:
                raise EmulatorError(NotImplementedError(f"Unknown opcode {inst.opcode:04X} at {address:04X}"))

        self.cycles += 1
        return inst

    def run(self, count: int) -> None:
        for _ in range(count):
            self.step()

    def tick_timers(self) -> None:
        tick_timers(self.state)

    @property
    def sound_active(self) -> bool:
        return self.state.sound_timer > 0
