from typing import Final

import numpy as np
import pygame
from numpy.typing import NDArray
from pychip8.state import SCREEN_HEIGHT, SCREEN_WIDTH

RGB = tuple[int, int, int]

_OUTLINE_WIDTH: Final[int] = 1


def to_rgb(display: NDArray[np.bool_], fg: RGB, bg: RGB) -> NDArray[np.uint8]:
    """Colour a ``(rows, cols)`` display into a ``(cols, rows, 3)`` array for ``pygame.surfarray``."""
    frame = np.empty((*display.shape, 3), dtype=np.uint8)
    frame[...] = bg
    frame[display] = fg
    return frame.transpose(1, 0, 2)


class RenderSprite:
    """Draws the 64x32 display onto a pygame surface, ``scale`` screen pixels per VM pixel."""

    def __init__(
        self,
        surface: pygame.Surface,
        fg: RGB = (255, 255, 255),
        bg: RGB = (0, 0, 0),
        scale: int = 20,
        pixel_outlines: bool = True,
        width: int = SCREEN_WIDTH,
        height: int = SCREEN_HEIGHT,
    ):
        self.surface = surface
        self.fg = fg
        self.bg = bg
        self.scale = scale
        self.pixel_outlines = pixel_outlines
        self.width = width
        self.height = height

        self.W = width * scale
        self.H = height * scale

        self._frame = pygame.Surface((width, height))

    def draw(self, display: NDArray[np.bool_]) -> None:
        pygame.surfarray.blit_array(self._frame, to_rgb(display, self.fg, self.bg))
        pygame.transform.scale(self._frame, (self.W, self.H), self.surface)

        if self.pixel_outlines and self.scale > 2:
            rows, cols = np.nonzero(display)
            for row, col in zip(rows.tolist(), cols.tolist()):
                rect = pygame.Rect(col * self.scale, row * self.scale, self.scale, self.scale)
                pygame.draw.rect(self.surface, self.bg, rect, _OUTLINE_WIDTH)

        pygame.display.flip()

    def __call__(self, display: NDArray[np.bool_]) -> None:
        self.draw(display)

    def export(self) -> NDArray[np.uint8]:
        """Current window contents as a ``(H, W, 3)`` array."""
        return pygame.surfarray.array3d(self.surface).transpose(1, 0, 2)
