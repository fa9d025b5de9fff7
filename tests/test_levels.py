import json

import pytest

from grid_puzzle.engine import DEFAULT_LEVELS, LevelCatalog, LevelFormatError, parse_level

from conftest import shape


def _level(**overrides):
    data = {
        "description": "test",
        "obstacles": [[0, 0]],
        "pieces": [{"id": 1, "shape": [[1, 1]]}],
    }
    data.update(overrides)
    return data


def test_default_catalog(catalog):
    assert catalog.numbers == [1, 2, 3]
    assert len(catalog) == 3
    level = catalog.get(1)
    assert level.board_size == 10
    assert level.obstacles == ((2, 2), (2, 7), (7, 2), (7, 7))
    assert level.piece_ids == [1, 2, 3]
    assert level.pieces[0].shape == shape([1, 1, 0], [0, 1, 0], [0, 1, 0])
    assert level.description.startswith("Welcome")
    assert [len(l.pieces) for l in catalog] == [3, 4, 5]


def test_next_number(catalog):
    assert catalog.first_number == 1
    assert catalog.next_number(1) == 2
    assert catalog.next_number(3) is None
    assert 2 in catalog
    assert 4 not in catalog


def test_unknown_level():
    with pytest.raises(LevelFormatError):
        LevelCatalog.default().get(42)


@pytest.mark.parametrize(
    "overrides",
    [
        {"obstacles": [[10, 0]]},
        {"obstacles": [[0, -1]]},
        {"obstacles": [[1, 1], [1, 1]]},
        {"obstacles": [[1]]},
        {"obstacles": [["a", 1]]},
        {"obstacles": None},
        {"obstacles": 5},
        {"pieces": []},
        {"pieces": 5},
        {"pieces": {"id": 1, "shape": [[1]]}},
        {"pieces": [{"id": 1, "shape": [[1, 1], [1]]}]},
        {"pieces": [{"id": 1, "shape": [[0, 0]]}]},
        {"pieces": [{"id": 1, "shape": [[1, 3]]}]},
        {"pieces": [{"id": 1, "shape": 5}]},
        {"pieces": [{"id": 1, "shape": [[1]]}, {"id": 1, "shape": [[1]]}]},
        {"pieces": [{"id": -2, "shape": [[1]]}]},
        {"pieces": [{"shape": [[1]]}]},
        {"pieces": [{"id": 1, "shape": [[1] * 11]}]},
        {"board_size": 0},
    ],
)
def test_malformed_level_rejected(overrides):
    with pytest.raises(LevelFormatError):
        parse_level(1, _level(**overrides))


def test_custom_board_size():
    level = parse_level(1, _level(board_size=4, obstacles=[[3, 3]]))
    assert level.board_size == 4
    with pytest.raises(LevelFormatError):
        parse_level(1, _level(board_size=4, obstacles=[[4, 0]]))


def test_bad_catalog_keys():
    with pytest.raises(LevelFormatError):
        LevelCatalog.from_mapping({"first": _level()})
    with pytest.raises(LevelFormatError):
        LevelCatalog.from_mapping({1: _level(), "1": _level()})
    with pytest.raises(LevelFormatError):
        LevelCatalog.from_mapping({})


def test_to_dict_parses_back(catalog):
    level = catalog.get(3)
    assert parse_level(3, level.to_dict()) == level


def test_from_json(tmp_path):
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({str(k): v for k, v in DEFAULT_LEVELS.items()}))
    catalog = LevelCatalog.from_json(path)
    assert catalog.numbers == [1, 2, 3]
    assert catalog.get(2).piece_ids == [1, 2, 3, 4]


def test_from_json_invalid(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(LevelFormatError):
        LevelCatalog.from_json(bad)
    listed = tmp_path / "list.json"
    listed.write_text("[]")
    with pytest.raises(LevelFormatError):
        LevelCatalog.from_json(listed)


def test_from_json_null_collections(tmp_path):
    path = tmp_path / "nulls.json"
    path.write_text(json.dumps({"1": _level(obstacles=None)}))
    with pytest.raises(LevelFormatError, match="obstacles"):
        LevelCatalog.from_json(path)
    path.write_text(json.dumps({"1": _level(pieces=7)}))
    with pytest.raises(LevelFormatError, match="pieces"):
        LevelCatalog.from_json(path)
