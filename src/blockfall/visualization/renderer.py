from __future__ import annotations

from typing import Optional

import numpy as np
import pygame

from blockfall.game import GameSnapshot, color_for_value


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, info_height: int = 40) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.info_height = info_height
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, rows: int, cols: int) -> tuple[int, int]:
        return (
            cols * self.cell_size + self.margin * 2,
            rows * self.cell_size + self.margin * 2 + self.info_height,
        )

    def _get_font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 26)
        return self._font

    def _grid_surface(self, state: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                color = color_for_value(int(state[y, x]))
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, color, rect)
        return surf

    def _overlay_piece(self, snapshot: GameSnapshot) -> np.ndarray:
        state = snapshot.board.copy()
        if snapshot.piece is not None:
            for x, y in snapshot.piece.cells_at(snapshot.x, snapshot.y):
                if 0 <= y < state.shape[0] and 0 <= x < state.shape[1]:
                    state[y, x] = snapshot.piece.value
        return state

    def draw_banner(self, screen: pygame.Surface, lines: list[str]) -> None:
        font = self._get_font()
        w, h = screen.get_size()
        box = pygame.Surface((w - self.margin * 2, 30 * len(lines) + 20), pygame.SRCALPHA)
        box.fill((20, 25, 40, 220))
        top = (h - box.get_height()) // 2
        screen.blit(box, (self.margin, top))
        for i, txt in enumerate(lines):
            img = font.render(txt, True, (255, 255, 255))
            rect = img.get_rect(center=(w // 2, top + 25 + i * 30))
            screen.blit(img, rect)

    def draw(self, screen: pygame.Surface, snapshot: GameSnapshot, banner: Optional[list[str]] = None) -> None:
        grid_surf = self._grid_surface(self._overlay_piece(snapshot))
        screen.fill((10, 10, 14))
        screen.blit(grid_surf, (self.margin, self.margin))

        font = self._get_font()
        y_text = self.margin * 2 + snapshot.board.shape[0] * self.cell_size - self.margin // 2
        info = [
            (f"Score: {snapshot.score}", (230, 230, 230)),
            (f"Level: {snapshot.level}", (230, 230, 230)),
            (f"High: {snapshot.high_score}", (240, 240, 0)),
        ]
        col_w = (screen.get_width() - self.margin * 2) // len(info)
        for i, (txt, color) in enumerate(info):
            screen.blit(font.render(txt, True, color), (self.margin + i * col_w, y_text))

        if banner:
            self.draw_banner(screen, banner)
        pygame.display.flip()
