import sys
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pychip8.cartridge import Rom  # noqa: E402
from pychip8.emulator import Emulator  # noqa: E402


def words(*ops: int) -> bytes:
    """Assemble instruction words into a big-endian program image."""
    return b"".join(op.to_bytes(2, "big") for op in ops)


@pytest.fixture
def make_emulator() -> Callable[..., Emulator]:
    def factory(program: bytes = b"", rng: Optional[np.random.Generator] = None) -> Emulator:
        emu = Emulator(rng=rng)
        emu.Load(Rom.from_bytes(program).unwrap())
        emu.Reset()
        return emu

    return factory
