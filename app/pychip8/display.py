from pychip8.state import FLAG, SCREEN_HEIGHT, SCREEN_WIDTH, VMState


def clear(state: VMState) -> None:
    state.display[:, :] = False


def draw_sprite(state: VMState, x: int, y: int, height: int) -> bool:
    """
    XOR an 8-pixel wide sprite read from memory at I onto the display.

    The start position wraps around the screen, the sprite itself does not:
    pixels running past the right edge end that row and rows running past the
    bottom edge end the sprite.

    Args:
        state: machine state, reads I and memory, writes display and VF
        x: start column (register value, any byte)
        y: start row (register value, any byte)
        height: number of sprite rows, 0-15

    Returns:
        True if any lit pixel was switched off (collision); VF holds the same.
    """
    origin_x = x % SCREEN_WIDTH
    row = y % SCREEN_HEIGHT
    display = state.display
    base = state.I

    state.V[FLAG] = 0
    collision = False

    for i in range(height):
        if row >= SCREEN_HEIGHT:
            break

        sprite_data = state.read(base + i)
        col = origin_x
        for bit in range(7, -1, -1):
            if col >= SCREEN_WIDTH:
                break
            if (sprite_data >> bit) & 1:
                if display[row, col]:
                    collision = True
                display[row, col] = not display[row, col]
            col += 1

        row += 1

    if collision:
        state.V[FLAG] = 1
    return collision
