import numpy as np
import pytest

from pychip8.decoder import decode
from pychip8.util.OpCodes import OpCodes


@pytest.mark.parametrize(
    "opcode, text",
    [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1228, "JP 0x228"),
        (0x2ABC, "CALL 0xABC"),
        (0x6102, "LD V1, 0x02"),
        (0x8AB4, "ADD VA, VB"),
        (0x8A06, "SHR VA"),
        (0xA20A, "LD I, 0x20A"),
        (0xD015, "DRW V0, V1, 5"),
        (0xF333, "LD B, V3"),
        (0xF565, "LD V5, [I]"),
        (0x0123, "DW 0x0123"),
        (0x5121, "DW 0x5121"),
    ],
)
def test_disassemble(opcode, text):
    assert OpCodes.Disassemble(opcode) == text


def test_get_entry_range():
    with pytest.raises(ValueError):
        OpCodes.GetEntry(0x10000)
    assert OpCodes.GetEntry(0xFFFF) is None
    assert OpCodes.GetName(0xFFFF) == "???"
    assert OpCodes.GetName(0xE19E) == "SKP"


def test_known_words_match_executor_groups():
    assert OpCodes.IsKnown(0x9120)
    assert not OpCodes.IsKnown(0x8128)
    assert "DRW" in OpCodes.GetAllMnemonics()


def test_describe():
    V = np.zeros(16, dtype=np.uint8)
    V[1] = 0x05
    desc = OpCodes.Describe(decode(0x7102), V, 0)
    assert desc == "Set register V1 (0x05) += NN (0x02). Result: 0x07"

    assert OpCodes.Describe(decode(0x0123), V, 0) == "unimplemented"

    keypad = np.zeros(16, dtype=np.bool_)
    keypad[5] = True
    assert OpCodes.Describe(decode(0xE19E), V, 0, keypad).endswith("key: 1")
