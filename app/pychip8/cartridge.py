import logging
from pathlib import Path
from typing import Final, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray
from returns.result import Failure, Result, Success

from pychip8.errors import RomLoadError
from pychip8.state import MAX_PROGRAM_SIZE

_logger = logging.getLogger("PyCHIP8.cartridge")


class Rom:
    """
    A CHIP-8 program image.

    The file format is raw bytes with no header; the whole file is copied into
    memory at 0x200, so its size is bounded by the memory above that address.
    """

    MAX_SIZE: Final[int] = MAX_PROGRAM_SIZE

    def __init__(self) -> None:
        self.file: str = ""
        self.data: NDArray[np.uint8] = np.zeros(0, dtype=np.uint8)

    def __repr__(self) -> str:
        return f"<Rom file={self.file!r} size={len(self.data)} bytes>"

    def __len__(self) -> int:
        return len(self.data)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> Result["Rom", str]:
        """
        Validate a program image held in memory.

        Args:
            data: Raw bytes of the program

        Returns:
            Result containing either a Rom instance or an error string.
        """
        if not isinstance(data, (bytes, bytearray)):
            return Failure(f"Expected bytes or bytearray, got {type(data).__name__}")

        if len(data) > cls.MAX_SIZE:
            return Failure(f"Rom is too big! Rom size: {len(data)}, max size allowed: {cls.MAX_SIZE}")

        if len(data) == 0:
            _logger.warning("Rom is empty, the machine will execute zeroed memory")

        obj = cls()
        obj.data = np.frombuffer(bytes(data), dtype=np.uint8).copy()
        return Success(obj)

    @classmethod
    def is_valid_file(cls, filepath: Union[Path, str]) -> Tuple[bool, Optional[str]]:
        """
        Check if a file can be loaded as a program image.

        Returns:
            A tuple of (is_valid, error_message); error_message is None if valid.
        """
        result = cls.from_file(filepath)
        if isinstance(result, Success):
            return True, None
        return False, result.failure()

    @classmethod
    def from_file(cls, filepath: Union[Path, str]) -> Result["Rom", str]:
        """
        Load a program image from a file path.

        Returns:
            Result containing either a Rom instance or an error string.
        """
        path = Path(filepath)
        try:
            size = path.stat().st_size
        except OSError as e:
            return Failure(f"Rom file {filepath} is invalid or does not exist: {e}")

        if size > cls.MAX_SIZE:
            return Failure(f"Rom file {filepath} is too big! Rom size: {size}, max size allowed: {cls.MAX_SIZE}")

        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            return Failure(f"Could not read Rom file {filepath}: {e}")

        if len(data) != size:
            return Failure(f"Could not read Rom file {filepath} into memory: short read ({len(data)} of {size} bytes)")

        def attach_file(rom: "Rom") -> "Rom":
            rom.file = str(filepath)
            return rom

        return cls.from_bytes(data).map(attach_file)


def load_rom(filepath: Union[Path, str]) -> Rom:
    """Like ``Rom.from_file`` but raises RomLoadError on failure."""
    result = Rom.from_file(filepath)
    if isinstance(result, Failure):
        raise RomLoadError(result.failure())
    return result.unwrap()
