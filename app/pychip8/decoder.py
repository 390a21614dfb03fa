from dataclasses import dataclass

from pychip8.state import VMState


@dataclass(frozen=True, slots=True)
class Instruction:
    opcode: int  # full 16 bit word
    nnn: int  # 12 bit address
    nn: int  # 8 bit immediate
    n: int  # 4 bit nibble
    x: int  # register index, bits 8-11
    y: int  # register index, bits 4-7

    @property
    def group(self) -> int:
        """Top nibble, the first level of dispatch."""
        return (self.opcode >> 12) & 0x0F

    def __str__(self) -> str:
        return f"{self.opcode:04X}"


def decode(word: int) -> Instruction:
    """Split a raw instruction word into its fields. Every word decodes."""
    word &= 0xFFFF
    return Instruction(
        opcode=word,
        nnn=word & 0x0FFF,
        nn=word & 0x00FF,
        n=word & 0x000F,
        x=(word >> 8) & 0x0F,
        y=(word >> 4) & 0x0F,
    )


def fetch(state: VMState) -> int:
    """Read the big-endian word at PC."""
    pc = state.PC
    return (state.read(pc) << 8) | state.read(pc + 1)
