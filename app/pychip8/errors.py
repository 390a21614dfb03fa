from typing import Optional, Type, Union


class EmulatorError(Exception):
    """Base exception for all PyCHIP8 related errors."""

    def __init__(self, exception: Union[BaseException, str]):
        self.original: Optional[BaseException] = exception if isinstance(exception, BaseException) else None
        self.exception: Type[BaseException] = type(exception) if self.original is not None else type(self)
        self.message: str = str(exception)
        super().__init__(self.message)


class RomLoadError(EmulatorError):
    """The program image is missing, unreadable or does not fit in memory."""


class StackOverflow(EmulatorError):
    """A subroutine call was made with all stack slots in use."""


class StackUnderflow(EmulatorError):
    """A return was executed with an empty stack."""
