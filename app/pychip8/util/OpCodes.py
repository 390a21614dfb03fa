from typing import Dict, List, Optional, Tuple, TypedDict

from pychip8.decoder import Instruction, decode


class OpCode(TypedDict):
    pattern: str
    mnemonic: str
    description: str


# (mask, value) -> entry. Checked in order, the first match wins.
list_OpCode: List[Tuple[int, int, OpCode]] = [
    (0xFFFF, 0x00E0, {"pattern": "00E0", "mnemonic": "CLS", "description": "Clear the screen"}),
    (0xFFFF, 0x00EE, {"pattern": "00EE", "mnemonic": "RET", "description": "Return from subroutine"}),
    (0xF000, 0x1000, {"pattern": "1NNN", "mnemonic": "JP", "description": "Jump to address NNN"}),
    (0xF000, 0x2000, {"pattern": "2NNN", "mnemonic": "CALL", "description": "Call subroutine at NNN"}),
    (0xF000, 0x3000, {"pattern": "3XNN", "mnemonic": "SE", "description": "Skip next instruction if VX == NN"}),
    (0xF000, 0x4000, {"pattern": "4XNN", "mnemonic": "SNE", "description": "Skip next instruction if VX != NN"}),
    (0xF00F, 0x5000, {"pattern": "5XY0", "mnemonic": "SE", "description": "Skip next instruction if VX == VY"}),
    (0xF000, 0x6000, {"pattern": "6XNN", "mnemonic": "LD", "description": "Set VX to NN"}),
    (0xF000, 0x7000, {"pattern": "7XNN", "mnemonic": "ADD", "description": "Set VX += NN"}),
    (0xF00F, 0x8000, {"pattern": "8XY0", "mnemonic": "LD", "description": "Set VX to VY"}),
    (0xF00F, 0x8001, {"pattern": "8XY1", "mnemonic": "OR", "description": "Set VX |= VY"}),
    (0xF00F, 0x8002, {"pattern": "8XY2", "mnemonic": "AND", "description": "Set VX &= VY"}),
    (0xF00F, 0x8003, {"pattern": "8XY3", "mnemonic": "XOR", "description": "Set VX ^= VY"}),
    (0xF00F, 0x8004, {"pattern": "8XY4", "mnemonic": "ADD", "description": "Set VX += VY, VF = 1 on carry"}),
    (0xF00F, 0x8005, {"pattern": "8XY5", "mnemonic": "SUB", "description": "Set VX -= VY, VF = 1 if no borrow"}),
    (0xF00F, 0x8006, {"pattern": "8XY6", "mnemonic": "SHR", "description": "Set VX >>= 1, VF = shifted out bit"}),
    (0xF00F, 0x8007, {"pattern": "8XY7", "mnemonic": "SUBN", "description": "Set VX = VY - VX, VF = 1 if no borrow"}),
    (0xF00F, 0x800E, {"pattern": "8XYE", "mnemonic": "SHL", "description": "Set VX <<= 1, VF = shifted out bit"}),
    (0xF000, 0x9000, {"pattern": "9XY0", "mnemonic": "SNE", "description": "Skip next instruction if VX != VY"}),
    (0xF000, 0xA000, {"pattern": "ANNN", "mnemonic": "LD", "description": "Set I to NNN"}),
    (0xF000, 0xB000, {"pattern": "BNNN", "mnemonic": "JP", "description": "Jump to V0 + NNN"}),
    (0xF000, 0xC000, {"pattern": "CXNN", "mnemonic": "RND", "description": "Set VX = random byte & NN"}),
    (0xF000, 0xD000, {"pattern": "DXYN", "mnemonic": "DRW", "description": "Draw N-height sprite at VX, VY from I"}),
    (0xF0FF, 0xE09E, {"pattern": "EX9E", "mnemonic": "SKP", "description": "Skip next instruction if key VX is pressed"}),
    (0xF0FF, 0xE0A1, {"pattern": "EXA1", "mnemonic": "SKNP", "description": "Skip next instruction if key VX is not pressed"}),
    (0xF0FF, 0xF007, {"pattern": "FX07", "mnemonic": "LD", "description": "Set VX = delay timer"}),
    (0xF0FF, 0xF00A, {"pattern": "FX0A", "mnemonic": "LD", "description": "Await a keypress and store it in VX"}),
    (0xF0FF, 0xF015, {"pattern": "FX15", "mnemonic": "LD", "description": "Set delay timer = VX"}),
    (0xF0FF, 0xF018, {"pattern": "FX18", "mnemonic": "LD", "description": "Set sound timer = VX"}),
    (0xF0FF, 0xF01E, {"pattern": "FX1E", "mnemonic": "ADD", "description": "Set I += VX"}),
    (0xF0FF, 0xF029, {"pattern": "FX29", "mnemonic": "LD", "description": "Set I = sprite location of digit VX"}),
    (0xF0FF, 0xF033, {"pattern": "FX33", "mnemonic": "LD", "description": "Store BCD of VX at I, I+1, I+2"}),
    (0xF0FF, 0xF055, {"pattern": "FX55", "mnemonic": "LD", "description": "Dump V0 - VX inclusive to memory at I"}),
    (0xF0FF, 0xF065, {"pattern": "FX65", "mnemonic": "LD", "description": "Load V0 - VX inclusive from memory at I"}),
]


class OpCodes:
    """CHIP-8 instruction lookup table."""

    @staticmethod
    def GetEntry(opcode: int) -> Optional[OpCode]:
        """
        Get the table entry matching an instruction word.

        Args:
            opcode: Instruction word (0x0000-0xFFFF)

        Returns:
            Entry with pattern, mnemonic and description, or None for
            words the machine treats as a no-op.

        Raises:
            ValueError: If opcode is out of valid range
        """
        if not (0 <= opcode <= 0xFFFF):
            raise ValueError(f"Invalid opcode: 0x{opcode:X} (must be 0x0000-0xFFFF)")
        for mask, value, entry in list_OpCode:
            if opcode & mask == value:
                return entry
        return None

    @staticmethod
    def GetName(opcode: int) -> str:
        entry = OpCodes.GetEntry(opcode)
        return entry["mnemonic"] if entry else "???"

    @staticmethod
    def IsKnown(opcode: int) -> bool:
        return OpCodes.GetEntry(opcode) is not None

    @staticmethod
    def GetAllMnemonics() -> List[str]:
        return sorted({entry["mnemonic"] for _, _, entry in list_OpCode})

    @staticmethod
    def Disassemble(opcode: int) -> str:
        """
        Disassemble one instruction word.

        Examples:
            >>> OpCodes.Disassemble(0x6102)
            'LD V1, 0x02'
            >>> OpCodes.Disassemble(0xD015)
            'DRW V0, V1, 5'
        """
        entry = OpCodes.GetEntry(opcode)
        if entry is None:
            return f"DW 0x{opcode:04X}"

        inst = decode(opcode)
        mnemonic = entry["mnemonic"]
        operands: Dict[str, str] = {
            "1NNN": f"0x{inst.nnn:03X}",
            "2NNN": f"0x{inst.nnn:03X}",
            "3XNN": f"V{inst.x:X}, 0x{inst.nn:02X}",
            "4XNN": f"V{inst.x:X}, 0x{inst.nn:02X}",
            "5XY0": f"V{inst.x:X}, V{inst.y:X}",
            "6XNN": f"V{inst.x:X}, 0x{inst.nn:02X}",
            "7XNN": f"V{inst.x:X}, 0x{inst.nn:02X}",
            "9XY0": f"V{inst.x:X}, V{inst.y:X}",
            "ANNN": f"I, 0x{inst.nnn:03X}",
            "BNNN": f"V0, 0x{inst.nnn:03X}",
            "CXNN": f"V{inst.x:X}, 0x{inst.nn:02X}",
            "DXYN": f"V{inst.x:X}, V{inst.y:X}, {inst.n}",
            "EX9E": f"V{inst.x:X}",
            "EXA1": f"V{inst.x:X}",
            "FX07": f"V{inst.x:X}, DT",
            "FX0A": f"V{inst.x:X}, K",
            "FX15": f"DT, V{inst.x:X}",
            "FX18": f"ST, V{inst.x:X}",
            "FX1E": f"I, V{inst.x:X}",
            "FX29": f"F, V{inst.x:X}",
            "FX33": f"B, V{inst.x:X}",
            "FX55": f"[I], V{inst.x:X}",
            "FX65": f"V{inst.x:X}, [I]",
        }
        pattern = entry["pattern"]
        if pattern.startswith("8"):
            if pattern in ("8XY6", "8XYE"):
                return f"{mnemonic} V{inst.x:X}"
            return f"{mnemonic} V{inst.x:X}, V{inst.y:X}"
        operand = operands.get(pattern)
        return f"{mnemonic} {operand}" if operand else mnemonic

    @staticmethod
    def Describe(inst: Instruction, V, I: int, keypad=None) -> str:
        """
        Human readable account of what an instruction is about to do, with the
        current register values filled in.
        """
        entry = OpCodes.GetEntry(inst.opcode)
        if entry is None:
            return "unimplemented"

        vx, vy = int(V[inst.x]), int(V[inst.y])
        x, y = inst.x, inst.y
        match entry["pattern"]:
            case "1NNN":
                return f"Jump to address NNN (0x{inst.nnn:04X})"
            case "2NNN":
                return f"Call subroutine at 0x{inst.nnn:04X}"
            case "3XNN" | "4XNN":
                op = "==" if entry["pattern"] == "3XNN" else "!="
                return f"if V{x:X} (0x{vx:02X}) {op} NN (0x{inst.nn:02X}) skip next instruction"
            case "5XY0" | "9XY0":
                op = "==" if entry["pattern"] == "5XY0" else "!="
                return f"if V{x:X} (0x{vx:02X}) {op} V{y:X} (0x{vy:02X}) skip next instruction"
            case "6XNN":
                return f"Set register V{x:X} to NN (0x{inst.nn:02X})"
            case "7XNN":
                return (
                    f"Set register V{x:X} (0x{vx:02X}) += NN (0x{inst.nn:02X}). "
                    f"Result: 0x{(vx + inst.nn) & 0xFF:02X}"
                )
            case "8XY4":
                return (
                    f"Set register V{x:X} (0x{vx:02X}) += V{y:X} (0x{vy:02X}). "
                    f"Result: 0x{(vx + vy) & 0xFF:02X}, VF = {int(vx + vy > 0xFF)}"
                )
            case "8XY5":
                return (
                    f"Set register V{x:X} (0x{vx:02X}) -= V{y:X} (0x{vy:02X}). "
                    f"Result: 0x{(vx - vy) & 0xFF:02X}, VF = {int(vx >= vy)}"
                )
            case "8XY7":
                return (
                    f"Set register V{x:X} = V{y:X} (0x{vy:02X}) - V{x:X} (0x{vx:02X}). "
                    f"Result: 0x{(vy - vx) & 0xFF:02X}, VF = {int(vx <= vy)}"
                )
            case "ANNN":
                return f"Set I to NNN (0x{inst.nnn:04X})"
            case "BNNN":
                return f"Set PC to V0 (0x{int(V[0]):02X}) + NNN (0x{inst.nnn:04X}). Result: 0x{int(V[0]) + inst.nnn:04X}"
            case "DXYN":
                return (
                    f"Draw N ({inst.n}) height sprite at coords V{x:X} (0x{vx:02X}), "
                    f"V{y:X} (0x{vy:02X}), Read from I (0x{I:04X})"
                )
            case "EX9E" | "EXA1":
                key = "?" if keypad is None else int(bool(keypad[vx & 0xF]))
                return f"{entry['description'].replace('VX', f'V{x:X} (0x{vx:02X})')}, key: {key}"
            case "FX1E":
                return f"I (0x{I:04X}) += V{x:X} (0x{vx:02X}). Result: 0x{(I + vx) & 0xFFFF:04X}"
            case "FX29":
                return f"I = sprite location in V{x:X} (0x{vx:02X}). Result: 0x{vx * 5:02X}"
            case "FX33" | "FX55" | "FX65":
                return f"{entry['description'].replace('VX', f'V{x:X} (0x{vx:02X})')} (I = 0x{I:04X})"
            case _:
                return entry["description"].replace("VX", f"V{x:X}").replace("VY", f"V{y:X}")
