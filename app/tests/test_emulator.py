import pytest
from conftest import words

from pychip8.cartridge import Rom
from pychip8.emulator import Emulator
from pychip8.errors import EmulatorError


def test_reset_requires_program():
    with pytest.raises(EmulatorError):
        Emulator().Reset()


def test_load_twice_rejected():
    emu = Emulator()
    emu.Load(Rom.from_bytes(b"\x00\xe0").unwrap())
    with pytest.raises(EmulatorError):
        emu.Load(Rom.from_bytes(b"\x00\xe0").unwrap())


def test_reset_rebuilds_state(make_emulator):
    emu = make_emulator(words(0x6155, 0x1202))
    emu.run(10)
    assert emu.state.V[1] == 0x55
    assert emu.cycles == 10

    emu.Reset()
    assert emu.state.V[1] == 0
    assert emu.state.PC == 0x200
    assert emu.cycles == 0


def test_malformed_keypad_rejected(make_emulator):
    emu = make_emulator()
    with pytest.raises(EmulatorError):
        emu.Input([True, False])


def test_decoded_event(make_emulator):
    emu = make_emulator(words(0x6102, 0x7105))
    seen = []

    @emu.on("decoded")
    def _(address, inst):
        seen.append((address, inst.opcode))

    emu.run(2)
    assert seen == [(0x200, 0x6102), (0x202, 0x7105)]


def test_unknown_opcode_event_is_not_fatal(make_emulator):
    emu = make_emulator(words(0x0123, 0x6107))
    unknown = []

    @emu.on("unknown_opcode")
    def _(address, inst):
        unknown.append((address, inst.opcode))

    emu.run(2)
    assert unknown == [(0x200, 0x0123)]
    assert emu.state.V[1] == 7


def test_halt_on_unknown_opcode(make_emulator):
    emu = make_emulator(words(0x0123))
    emu.debug.HaltOn.UnknownOpcode = True
    with pytest.raises(EmulatorError):
        emu.step()


def test_tracelogger_only_when_logging(make_emulator):
    emu = make_emulator(words(0x6102, 0x7105, 0xFFFF))
    lines = []

    @emu.on("tracelogger")
    def _(line):
        lines.append(line)

    emu.step()
    assert lines == []

    emu.debug.Logging = True
    emu.step()
    emu.step()
    assert len(lines) == 2
    assert lines[0].startswith("0202: opcode: 7105")
    assert "V1" in lines[0]
    assert lines[1].endswith("unimplemented")
    assert list(emu.tracelog) == lines


def test_sound_active(make_emulator):
    emu = make_emulator(words(0x6002, 0xF018))
    emu.run(2)
    assert emu.sound_active
    emu.tick_timers()
    emu.tick_timers()
    assert not emu.sound_active
