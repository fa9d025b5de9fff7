from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pygame

from grid_puzzle.engine import (
    Board,
    Event,
    LevelCatalog,
    Obstacle,
    OccupiedBy,
    Outcome,
    PuzzleSession,
)


PIECE_COLORS = [
    (248, 113, 113),
    (96, 165, 250),
    (74, 222, 128),
    (250, 204, 21),
    (192, 132, 252),
    (244, 114, 182),
    (129, 140, 248),
    (45, 212, 191),
]

NOTICE_MS = 2000


def _color_for_cell(cell) -> Tuple[int, int, int]:
    if isinstance(cell, Obstacle):
        return (31, 41, 55)
    if isinstance(cell, OccupiedBy):
        return PIECE_COLORS[cell.piece_id % len(PIECE_COLORS)]
    return (245, 245, 245)


@dataclass(frozen=True)
class PanelLayout:
    """Pixel geometry of the window: the board on the left, inventory slots on the right.

    Slots are sized from the catalog (largest piece, most pieces in a level) so
    every inventory slot of every level lies inside the window.
    """

    board_size: int
    cell_size: int
    margin: int
    max_pieces: int
    piece_extent: int

    @classmethod
    def from_catalog(cls, catalog: LevelCatalog, cell_size: int = 40, margin: int = 20) -> "PanelLayout":
        levels = list(catalog)
        return cls(
            board_size=max(level.board_size for level in levels),
            cell_size=cell_size,
            margin=margin,
            max_pieces=max(len(level.pieces) for level in levels),
            piece_extent=max(max(p.shape.dimensions) for level in levels for p in level.pieces),
        )

    @property
    def mini(self) -> int:
        return self.cell_size // 2

    @property
    def slot_pitch(self) -> int:
        return (self.piece_extent + 1) * self.mini

    @property
    def board_px(self) -> int:
        return self.board_size * self.cell_size

    @property
    def panel_x(self) -> int:
        return self.margin * 2 + self.board_px

    @property
    def width(self) -> int:
        return self.panel_x + self.margin + max(6 * self.cell_size, self.slot_pitch)

    @property
    def height(self) -> int:
        board_area = self.margin * 2 + self.board_px + 120
        panel_area = self.margin * 2 + self.max_pieces * self.slot_pitch
        return max(board_area, panel_area)

    def slot_top(self, idx: int) -> int:
        return self.margin + idx * self.slot_pitch


def cell_at(pos: Tuple[int, int], size: int, cell_size: int, margin: int) -> Optional[Tuple[int, int]]:
    """Board (row, col) under a pixel position, or None off the board."""
    mx, my = pos
    col = (mx - margin) // cell_size
    row = (my - margin) // cell_size
    if mx < margin or my < margin or not (0 <= row < size and 0 <= col < size):
        return None
    return int(row), int(col)


def piece_slot_at(pos: Tuple[int, int], session: PuzzleSession, layout: PanelLayout) -> Optional[int]:
    """Inventory index whose side-panel slot contains the pixel position."""
    mx, my = pos
    if mx < layout.panel_x:
        return None
    idx = (my - layout.margin) // layout.slot_pitch
    if my < layout.margin or not (0 <= idx < len(session.inventory)):
        return None
    return int(idx)


def draw_board(screen: pygame.Surface, board: Board, cell_size: int, margin: int) -> None:
    screen.fill((226, 232, 240))
    for row, cells in enumerate(board.to_rows()):
        for col, cell in enumerate(cells):
            rect = pygame.Rect(margin + col * cell_size, margin + row * cell_size, cell_size - 1, cell_size - 1)
            pygame.draw.rect(screen, _color_for_cell(cell), rect)


def draw_preview(screen: pygame.Surface, session: PuzzleSession, anchor: Tuple[int, int], cell_size: int, margin: int) -> None:
    preview = session.preview(anchor)
    if preview is None:
        return
    color = (34, 197, 94) if preview.placeable else (239, 68, 68)
    for row, col in preview.cells:
        rect = pygame.Rect(margin + col * cell_size, margin + row * cell_size, cell_size - 1, cell_size - 1)
        pygame.draw.rect(screen, color, rect, 2)


def draw_pieces(screen: pygame.Surface, session: PuzzleSession, layout: PanelLayout) -> None:
    x0 = layout.panel_x
    mini = layout.mini
    for idx, piece in enumerate(session.inventory):
        shape = session.effective_shape if idx == session.selected_index else piece.shape
        off_y = layout.slot_top(idx)
        for r, c in shape.cells():
            rect = pygame.Rect(x0 + c * mini, off_y + r * mini, mini - 1, mini - 1)
            pygame.draw.rect(screen, (96, 165, 250), rect)
        if idx == session.selected_index:
            outline = pygame.Rect(x0 - 2, off_y - 2, shape.width * mini + 4, shape.height * mini + 4)
            pygame.draw.rect(screen, (37, 99, 235), outline, 2)


def draw_text(screen: pygame.Surface, font, lines: List[str], x: int, y: int) -> None:
    for i, txt in enumerate(lines):
        img = font.render(txt, True, (31, 41, 55))
        screen.blit(img, (x, y + i * 20))


def run(session: Optional[PuzzleSession] = None) -> None:
    pygame.init()
    try:
        session = session or PuzzleSession()
        layout = PanelLayout.from_catalog(session.catalog)
        cell_size = layout.cell_size
        margin = layout.margin
        board_px = layout.board_px
        screen = pygame.display.set_mode((layout.width, layout.height))
        pygame.display.set_caption("Grid Puzzle Master")
        font = pygame.font.SysFont(None, 24)

        notice: Optional[Event] = None
        notice_until = 0

        running = True
        clock = pygame.time.Clock()
        while running:
            events: Tuple[Event, ...] = ()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        if event.mod & pygame.KMOD_SHIFT:
                            events = session.rotate_all().events
                        else:
                            events = session.rotate().events
                    elif event.key == pygame.K_BACKSPACE:
                        events = session.reset_level().events
                    elif event.key == pygame.K_n:
                        events = session.advance_level().events
                    elif pygame.K_1 <= event.key <= pygame.K_9:
                        events = session.select_piece(event.key - pygame.K_1).events
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    cell = cell_at(event.pos, session.board.size, cell_size, margin)
                    if cell is not None:
                        events = session.click(cell).events
                    else:
                        slot = piece_slot_at(event.pos, session, layout)
                        if slot is not None:
                            events = session.select_piece(slot).events

            # Notifications only for outcomes worth telling the player about
            for ev in events:
                if ev.outcome in (
                    Outcome.PLACEMENT_REJECTED,
                    Outcome.LEVEL_COMPLETE,
                    Outcome.LEVEL_ADVANCED,
                    Outcome.LEVEL_ADVANCE_UNAVAILABLE,
                ):
                    notice = ev
                    notice_until = pygame.time.get_ticks() + NOTICE_MS

            draw_board(screen, session.board, cell_size, margin)
            hovered = cell_at(pygame.mouse.get_pos(), session.board.size, cell_size, margin)
            if hovered is not None and not isinstance(session.board.cell(hovered), OccupiedBy):
                draw_preview(screen, session, hovered, cell_size, margin)
            draw_pieces(screen, session, layout)

            level = session.level
            info_lines = [
                f"Level {level.number}  |  Pieces left: {session.pieces_left}",
                level.description,
                "Select: click piece or 1-9  Rotate: R (Shift+R all)",
                "Place/remove: click board  Reset: Backspace  Next: N",
            ]
            if session.is_stuck:
                info_lines.append("No piece fits - remove a piece or reset")
            draw_text(screen, font, info_lines, margin, margin * 2 + board_px)
            if notice is not None and pygame.time.get_ticks() < notice_until:
                color = (220, 38, 38) if notice.outcome == Outcome.PLACEMENT_REJECTED else (22, 163, 74)
                img = font.render(notice.message, True, color)
                screen.blit(img, (margin, 2))

            pygame.display.flip()
            clock.tick(60)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
