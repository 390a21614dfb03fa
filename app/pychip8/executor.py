from typing import Final, Optional

import numpy as np
from returns.result import Failure

from pychip8.decoder import Instruction
from pychip8.display import clear, draw_sprite
from pychip8.state import ADDRESS_MASK, FLAG, GLYPH_SIZE, KEY_COUNT, VMState

SKIP: Final[int] = 2


class Executor:
    """
    Runs one decoded instruction against a VMState.

    PC is expected to already point past the instruction; control flow opcodes
    overwrite it, skips add another 2 and FX0A rewinds it by 2 so the same
    instruction comes around again on the next cycle.
    """

    def __init__(self, state: VMState, rng: Optional[np.random.Generator] = None) -> None:
        self.state: VMState = state
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng()

    def execute(self, inst: Instruction) -> bool:
        """
        Execute the instruction.

        Returns:
            False if the word matches no known instruction. Such words are
            no-ops; the caller may report them.
        """
        s = self.state
        V = s.V
        x, y = inst.x, inst.y

        match inst.group:
            case 0x0:
                match inst.nn:
                    case 0xE0:  # 00E0 CLS
                        clear(s)
                    case 0xEE:  # 00EE RET
                        popped = s.stack.pop()
                        if isinstance(popped, Failure):
                            raise popped.failure()
                        s.PC = popped.unwrap()
                    case _:
                        return False

            case 0x1:  # 1NNN JP addr
                s.PC = inst.nnn

            case 0x2:  # 2NNN CALL addr
                pushed = s.stack.push(s.PC)
                if isinstance(pushed, Failure):
                    raise pushed.failure()
                s.PC = inst.nnn

            case 0x3:  # 3XNN SE Vx, byte
                if int(V[x]) == inst.nn:
                    s.PC += SKIP

            case 0x4:  # 4XNN SNE Vx, byte
                if int(V[x]) != inst.nn:
                    s.PC += SKIP

            case 0x5:  # 5XY0 SE Vx, Vy
                if inst.n != 0:
                    return False
                if V[x] == V[y]:
                    s.PC += SKIP

            case 0x6:  # 6XNN LD Vx, byte
                V[x] = inst.nn

            case 0x7:  # 7XNN ADD Vx, byte
                V[x] = (int(V[x]) + inst.nn) & 0xFF

            case 0x8:
                return self._execute_alu(inst)

            case 0x9:  # 9XY0 SNE Vx, Vy
                if V[x] != V[y]:
                    s.PC += SKIP

            case 0xA:  # ANNN LD I, addr
                s.I = inst.nnn

            case 0xB:  # BNNN JP V0, addr
                s.PC = (int(V[0]) + inst.nnn) & ADDRESS_MASK

            case 0xC:  # CXNN RND Vx, byte
                V[x] = int(self.rng.integers(0, 256)) & inst.nn

            case 0xD:  # DXYN DRW Vx, Vy, nibble
                draw_sprite(s, int(V[x]), int(V[y]), inst.n)

            case 0xE:
                pressed = bool(s.keypad[int(V[x]) % KEY_COUNT])
                match inst.nn:
                    case 0x9E:  # EX9E SKP Vx
                        if pressed:
                            s.PC += SKIP
                    case 0xA1:  # EXA1 SKNP Vx
                        if not pressed:
                            s.PC += SKIP
                    case _:
                        return False

            case 0xF:
                return self._execute_misc(inst)

        return True

    def _execute_alu(self, inst: Instruction) -> bool:
        """8XYN register to register group. Flags come from the operands as read before any write."""
        V = self.state.V
        x, y = inst.x, inst.y
        vx, vy = int(V[x]), int(V[y])

        match inst.n:
            case 0x0:  # 8XY0 LD Vx, Vy
                V[x] = vy
            case 0x1:  # 8XY1 OR Vx, Vy
                V[x] = vx | vy
            case 0x2:  # 8XY2 AND Vx, Vy
                V[x] = vx & vy
            case 0x3:  # 8XY3 XOR Vx, Vy
                V[x] = vx ^ vy
            case 0x4:  # 8XY4 ADD Vx, Vy
                total = vx + vy
                V[x] = total & 0xFF
                V[FLAG] = 1 if total > 0xFF else 0
            case 0x5:  # 8XY5 SUB Vx, Vy
                V[x] = (vx - vy) & 0xFF
                V[FLAG] = 1 if vx >= vy else 0
            case 0x6:  # 8XY6 SHR Vx
                V[x] = vx >> 1
                V[FLAG] = vx & 0x01
            case 0x7:  # 8XY7 SUBN Vx, Vy
                V[x] = (vy - vx) & 0xFF
                V[FLAG] = 1 if vx <= vy else 0
            case 0xE:  # 8XYE SHL Vx
                V[x] = (vx << 1) & 0xFF
                V[FLAG] = (vx & 0x80) >> 7
            case _:
                return False
        return True

    def _execute_misc(self, inst: Instruction) -> bool:
        """FXNN timers, keypad wait and index register group."""
        s = self.state
        V = s.V
        x = inst.x

        match inst.nn:
            case 0x07:  # FX07 LD Vx, DT
                V[x] = s.delay_timer & 0xFF
            case 0x0A:  # FX0A LD Vx, K
                for key in range(KEY_COUNT):
                    if s.keypad[key]:
                        V[x] = key
                        break
                else:
                    s.PC -= SKIP
            case 0x15:  # FX15 LD DT, Vx
                s.delay_timer = int(V[x])
            case 0x18:  # FX18 LD ST, Vx
                s.sound_timer = int(V[x])
            case 0x1E:  # FX1E ADD I, Vx
                s.I = s.I + int(V[x])
            case 0x29:  # FX29 LD F, Vx
                s.I = int(V[x]) * GLYPH_SIZE
            case 0x33:  # FX33 LD B, Vx
                value = int(V[x])
                s.write(s.I, value // 100)
                s.write(s.I + 1, (value // 10) % 10)
                s.write(s.I + 2, value % 10)
            case 0x55:  # FX55 LD [I], Vx
                for i in range(x + 1):
                    s.write(s.I + i, int(V[i]))
            case 0x65:  # FX65 LD Vx, [I]
                for i in range(x + 1):
                    V[i] = s.read(s.I + i)
            case _:
                return False
        return True
