import pytest

pygame = pytest.importorskip("pygame")

from grid_puzzle.engine import GameConfig, PuzzleSession  # noqa: E402
from grid_puzzle.visualization.puzzle_play import (  # noqa: E402
    PanelLayout,
    cell_at,
    draw_board,
    draw_pieces,
    draw_preview,
    piece_slot_at,
)


def test_cell_at():
    assert cell_at((20, 20), 10, 40, 20) == (0, 0)
    assert cell_at((20 + 3 * 40 + 5, 20 + 7 * 40 + 5), 10, 40, 20) == (7, 3)
    assert cell_at((10, 50), 10, 40, 20) is None
    assert cell_at((20 + 400, 30), 10, 40, 20) is None


def test_piece_slot_at():
    session = PuzzleSession()
    layout = PanelLayout.from_catalog(session.catalog)
    assert layout.slot_pitch == 80
    x0 = layout.panel_x
    assert piece_slot_at((x0 + 5, 25), session, layout) == 0
    assert piece_slot_at((x0 + 5, 20 + 2 * 80 + 5), session, layout) == 2
    assert piece_slot_at((x0 + 5, 20 + 3 * 80 + 5), session, layout) is None
    assert piece_slot_at((100, 25), session, layout) is None


def test_layout_keeps_window_size():
    layout = PanelLayout.from_catalog(PuzzleSession().catalog)
    assert (layout.width, layout.height) == (700, 560)


def test_every_slot_of_largest_level_is_inside_window():
    session = PuzzleSession(config=GameConfig(start_level=3))
    layout = PanelLayout.from_catalog(session.catalog)
    assert len(session.inventory) == 5
    hit = {piece_slot_at((layout.panel_x + 5, y), session, layout) for y in range(layout.height)}
    hit.discard(None)
    assert hit == {0, 1, 2, 3, 4}
    last = layout.slot_top(4) + layout.piece_extent * layout.mini
    assert last <= layout.height



def test_draw_onto_surface():
    session = PuzzleSession()
    session.select_piece(0)
    session.attempt_placement((0, 0))
    session.select_piece(0)
    surface = pygame.Surface((700, 560))
    draw_board(surface, session.board, 40, 20)
    draw_preview(surface, session, (4, 4), 40, 20)
    draw_pieces(surface, session, PanelLayout.from_catalog(session.catalog))
    # obstacle at (2, 2)
    assert tuple(surface.get_at((20 + 2 * 40 + 10, 20 + 2 * 40 + 10)))[:3] == (31, 41, 55)
