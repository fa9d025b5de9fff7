import json

from grid_puzzle.engine import Board, LevelCatalog, PuzzleSession
from grid_puzzle.engine.display import format_board, format_shape, main, run_demo

from conftest import shape


def test_format_board(board):
    placed = board.place(shape([1, 1]), (0, 0), 3)
    lines = format_board(placed).splitlines()
    assert len(lines) == 10
    assert lines[0] == "33........"
    assert lines[2] == "..#....#.."


def test_format_shape():
    assert format_shape(shape([1, 0], [1, 1])) == "█·\n██"


def test_run_demo_completes_level(capsys):
    session = PuzzleSession(LevelCatalog.default())
    run_demo(session)
    out = capsys.readouterr().out
    assert "=== Level 1 ===" in out
    assert "level_complete" in out
    assert session.is_complete


def test_main_with_json_catalog(tmp_path, capsys):
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({"5": {"description": "tiny", "board_size": 3, "pieces": [{"id": 1, "shape": [[1, 1, 1]]}]}}))
    main(["--levels", str(path), "--level", "5"])
    out = capsys.readouterr().out
    assert "=== Level 5 ===" in out
    assert "Pieces left: 0" in out


def test_board_export_is_plain_ints():
    assert Board(3).to_array().tolist() == [[-1] * 3] * 3
