import numpy as np
import pytest
from conftest import words

from pychip8.decoder import decode
from pychip8.errors import StackOverflow, StackUnderflow
from pychip8.executor import Executor
from pychip8.state import FLAG, STACK_DEPTH, VMState


def run_op(state: VMState, op: int, rng=None) -> bool:
    """Execute a single word the way the emulator does: PC advanced first."""
    state.PC = state.PC + 2
    return Executor(state, rng).execute(decode(op))


def test_load_then_add(make_emulator):
    emu = make_emulator(words(0x6102, 0x7105))
    emu.step()
    emu.step()
    assert emu.state.V[1] == 7
    assert emu.state.PC == 0x204


def test_add_immediate_wraps_and_keeps_flag():
    state = VMState()
    state.V[3] = 0xFF
    state.V[FLAG] = 0x42
    run_op(state, 0x7302)
    assert state.V[3] == 0x01
    assert state.V[FLAG] == 0x42


def test_call_and_return(make_emulator):
    program = bytearray(words(0x2208)) + bytes(6) + words(0x00EE)
    emu = make_emulator(bytes(program))
    emu.step()
    assert emu.state.PC == 0x208
    assert len(emu.state.stack) == 1
    emu.step()
    assert emu.state.PC == 0x202
    assert len(emu.state.stack) == 0


def test_jump():
    state = VMState()
    run_op(state, 0x1ABC)
    assert state.PC == 0xABC


def test_jump_with_offset_masked():
    state = VMState()
    state.V[0] = 0x10
    run_op(state, 0xBFF8)
    assert state.PC == 0x008


@pytest.mark.parametrize(
    "op, vx, expected_pc",
    [
        (0x3A12, 0x12, 0x204),
        (0x3A12, 0x13, 0x202),
        (0x4A12, 0x12, 0x202),
        (0x4A12, 0x13, 0x204),
    ],
)
def test_skip_immediate(op, vx, expected_pc):
    state = VMState()
    state.V[0xA] = vx
    run_op(state, op)
    assert state.PC == expected_pc


def test_skip_register_compare():
    state = VMState()
    state.V[1] = state.V[2] = 9
    run_op(state, 0x5120)
    assert state.PC == 0x204

    state = VMState()
    state.V[1] = 9
    run_op(state, 0x9120)
    assert state.PC == 0x204


def test_5xyn_with_nonzero_n_is_reported_noop():
    state = VMState()
    state.V[1] = state.V[2] = 9
    assert run_op(state, 0x5121) is False
    assert state.PC == 0x202


@pytest.mark.parametrize(
    "op, vx, vy, result",
    [
        (0x8120, 0x0F, 0xF0, 0xF0),
        (0x8121, 0x0F, 0xF0, 0xFF),
        (0x8122, 0x3C, 0x0F, 0x0C),
        (0x8123, 0xFF, 0x0F, 0xF0),
    ],
)
def test_logic_ops(op, vx, vy, result):
    state = VMState()
    state.V[1], state.V[2] = vx, vy
    run_op(state, op)
    assert state.V[1] == result


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [
        (0xF0, 0x20, 0x10, 1),
        (0x10, 0x20, 0x30, 0),
        (0xFF, 0x01, 0x00, 1),
        (0x7F, 0x80, 0xFF, 0),
    ],
)
def test_add_registers_carry(vx, vy, result, flag):
    state = VMState()
    state.V[1], state.V[2] = vx, vy
    state.V[FLAG] = 7
    run_op(state, 0x8124)
    assert state.V[1] == result
    assert state.V[FLAG] == flag


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [
        (0x30, 0x10, 0x20, 1),
        (0x10, 0x10, 0x00, 1),
        (0x10, 0x30, 0xE0, 0),
    ],
)
def test_sub_flag(vx, vy, result, flag):
    state = VMState()
    state.V[1], state.V[2] = vx, vy
    run_op(state, 0x8125)
    assert state.V[1] == result
    assert state.V[FLAG] == flag


@pytest.mark.parametrize(
    "vx, vy, result, flag",
    [
        (0x10, 0x30, 0x20, 1),
        (0x10, 0x10, 0x00, 1),
        (0x30, 0x10, 0xE0, 0),
    ],
)
def test_subn_flag(vx, vy, result, flag):
    state = VMState()
    state.V[1], state.V[2] = vx, vy
    run_op(state, 0x8127)
    assert state.V[1] == result
    assert state.V[FLAG] == flag


def test_shifts():
    state = VMState()
    state.V[4] = 0b1000_0011
    run_op(state, 0x8406)
    assert state.V[4] == 0b0100_0001
    assert state.V[FLAG] == 1

    state = VMState()
    state.V[4] = 0b1000_0010
    run_op(state, 0x840E)
    assert state.V[4] == 0b0000_0100
    assert state.V[FLAG] == 1

    state = VMState()
    state.V[4] = 0b0000_0010
    run_op(state, 0x840E)
    assert state.V[4] == 0b0000_0100
    assert state.V[FLAG] == 0


def test_flag_wins_when_vf_is_destination():
    state = VMState()
    state.V[FLAG] = 0xFF
    state.V[1] = 0x01
    run_op(state, 0x8F14)
    assert state.V[FLAG] == 1


def test_unknown_alu_op_is_reported():
    state = VMState()
    assert run_op(state, 0x8128) is False


def test_index_ops(make_emulator):
    emu = make_emulator(words(0xA20A, 0x6105, 0xF11E))
    emu.run(3)
    assert emu.state.I == 0x20F


def test_add_index_wraps_16_bits_and_keeps_flag():
    state = VMState()
    state.I = 0xFFFF
    state.V[2] = 2
    state.V[FLAG] = 3
    run_op(state, 0xF21E)
    assert state.I == 0x0001
    assert state.V[FLAG] == 3


def test_font_address():
    state = VMState()
    state.V[3] = 0xA
    run_op(state, 0xF329)
    assert state.I == 50


def test_bcd():
    state = VMState()
    state.V[5] = 156
    state.I = 0x300
    run_op(state, 0xF533)
    assert [state.read(0x300 + i) for i in range(3)] == [1, 5, 6]


def test_store_and_load_registers():
    state = VMState()
    for i in range(4):
        state.V[i] = 0x10 + i
    state.I = 0x400
    run_op(state, 0xF355)
    assert [state.read(0x400 + i) for i in range(5)] == [0x10, 0x11, 0x12, 0x13, 0x00]
    assert state.I == 0x400

    state.V[:] = 0
    run_op(state, 0xF265)
    assert list(state.V[:4]) == [0x10, 0x11, 0x12, 0x00]


def test_timer_registers():
    state = VMState()
    state.V[1] = 30
    run_op(state, 0xF115)
    run_op(state, 0xF118)
    assert state.delay_timer == 30
    assert state.sound_timer == 30

    state.delay_timer = 12
    run_op(state, 0xF207)
    assert state.V[2] == 12


def test_random_is_masked_and_seeded():
    first = VMState()
    second = VMState()
    run_op(first, 0xC10F, np.random.default_rng(1234))
    run_op(second, 0xC10F, np.random.default_rng(1234))
    assert first.V[1] == second.V[1]
    assert first.V[1] & 0xF0 == 0

    state = VMState()
    run_op(state, 0xC100, np.random.default_rng(1))
    assert state.V[1] == 0


def test_key_skips():
    state = VMState()
    state.V[1] = 0x7
    state.keypad[0x7] = True
    run_op(state, 0xE19E)
    assert state.PC == 0x204

    state = VMState()
    state.V[1] = 0x7
    run_op(state, 0xE1A1)
    assert state.PC == 0x204


def test_wait_for_key(make_emulator):
    emu = make_emulator(words(0xF30A))
    for _ in range(5):
        emu.step()
        assert emu.state.PC == 0x200

    keys = [False] * 16
    keys[0x9] = True
    keys[0xC] = True
    emu.Input(keys)
    emu.step()
    assert emu.state.PC == 0x202
    assert emu.state.V[3] == 0x9


def test_clear_screen():
    state = VMState()
    state.display[5, 5] = True
    run_op(state, 0x00E0)
    assert not state.display.any()


def test_stack_overflow_is_fatal():
    state = VMState()
    executor = Executor(state)
    for _ in range(STACK_DEPTH):
        executor.execute(decode(0x2300))
    with pytest.raises(StackOverflow):
        executor.execute(decode(0x2300))


def test_return_on_empty_stack_is_fatal():
    with pytest.raises(StackUnderflow):
        run_op(VMState(), 0x00EE)


@pytest.mark.parametrize("op", [0x0123, 0xE1FF, 0xF1FF, 0x812F])
def test_unknown_words_are_noops(op):
    state = VMState()
    before = state.memory.copy()
    assert run_op(state, op) is False
    assert state.PC == 0x202
    assert not state.V.any()
    assert (state.memory == before).all()
