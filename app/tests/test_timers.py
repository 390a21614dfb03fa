from conftest import words

from pychip8.state import VMState
from pychip8.timers import tick_timers


def test_tick_decrements_both():
    state = VMState()
    state.delay_timer = 3
    state.sound_timer = 1
    tick_timers(state)
    assert state.delay_timer == 2
    assert state.sound_timer == 0


def test_timers_never_go_below_zero():
    state = VMState()
    state.delay_timer = 2
    for _ in range(10):
        tick_timers(state)
    assert state.delay_timer == 0
    assert state.sound_timer == 0


def test_tick_independent_of_instructions(make_emulator):
    emu = make_emulator(words(0x6A3C, 0xFA15, 0x1204))
    emu.run(100)
    assert emu.state.delay_timer == 0x3C
    emu.tick_timers()
    assert emu.state.delay_timer == 0x3B
