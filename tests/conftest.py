import pytest

from grid_puzzle.engine import Board, LevelCatalog, PuzzleSession, Shape


SCENARIO_OBSTACLES = [(2, 2), (2, 7), (7, 2), (7, 7)]


def shape(*rows):
    return Shape.from_rows([list(r) for r in rows])


@pytest.fixture
def catalog():
    return LevelCatalog.default()


@pytest.fixture
def session(catalog):
    return PuzzleSession(catalog)


@pytest.fixture
def board():
    """10x10 board with the four level-1 obstacles."""
    return Board.with_obstacles(10, SCENARIO_OBSTACLES)


@pytest.fixture
def single_piece_catalog():
    """Two levels; the first holds exactly one domino."""
    return LevelCatalog.from_mapping(
        {
            1: {"description": "one piece", "obstacles": [[0, 0]], "pieces": [{"id": 7, "shape": [[1, 1]]}]},
            2: {"description": "next", "obstacles": [], "pieces": [{"id": 1, "shape": [[1]]}]},
        }
    )
