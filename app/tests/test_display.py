import numpy as np
from conftest import words

from pychip8.display import clear, draw_sprite
from pychip8.state import FLAG, VMState


def test_font_glyph_zero_top_row():
    state = VMState()
    state.I = 0x000
    collision = draw_sprite(state, 0, 0, 5)
    assert not collision
    assert list(state.display[0, :8]) == [True, True, True, True, False, False, False, False]
    assert list(state.display[1, :8]) == [True, False, False, True, False, False, False, False]
    assert state.V[FLAG] == 0


def test_draw_twice_restores_and_flags():
    state = VMState()
    state.I = 0x000
    draw_sprite(state, 10, 4, 5)
    assert state.display.any()

    collision = draw_sprite(state, 10, 4, 5)
    assert collision
    assert state.V[FLAG] == 1
    assert not state.display.any()


def test_partial_overlap_sets_flag():
    state = VMState()
    state.I = 0x300
    state.write(0x300, 0b1000_0000)
    draw_sprite(state, 0, 0, 1)
    state.write(0x300, 0b1100_0000)
    assert draw_sprite(state, 0, 0, 1)
    assert list(state.display[0, :2]) == [False, True]


def test_origin_wraps():
    state = VMState()
    state.I = 0x300
    state.write(0x300, 0b1000_0000)
    draw_sprite(state, 64 + 3, 32 + 2, 1)
    assert state.display[2, 3]
    assert state.display.sum() == 1


def test_sprite_clips_at_right_edge():
    state = VMState()
    state.I = 0x300
    state.write(0x300, 0xFF)
    draw_sprite(state, 60, 0, 1)
    assert state.display[0, 60:].all()
    assert not state.display[0, :4].any()
    assert state.display.sum() == 4


def test_sprite_clips_at_bottom_edge():
    state = VMState()
    state.I = 0x300
    for i in range(4):
        state.write(0x300 + i, 0x80)
    draw_sprite(state, 0, 30, 4)
    assert state.display[30, 0] and state.display[31, 0]
    assert not state.display[0, 0] and not state.display[1, 0]
    assert state.display.sum() == 2


def test_zero_height_draws_nothing_and_clears_flag():
    state = VMState()
    state.V[FLAG] = 1
    assert not draw_sprite(state, 5, 5, 0)
    assert state.V[FLAG] == 0
    assert not state.display.any()


def test_draw_opcode_reads_registers(make_emulator):
    emu = make_emulator(words(0x6008, 0x6104, 0xA000, 0xD015))
    emu.run(4)
    assert emu.state.display[4, 8:12].all()
    assert emu.state.V[FLAG] == 0


def test_clear():
    state = VMState()
    state.display[:] = np.ones_like(state.display)
    clear(state)
    assert not state.display.any()
