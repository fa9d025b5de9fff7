import numpy as np
import pytest

from grid_puzzle.engine import Shape, ShapeError, apply_rotations, rotate_clockwise

from conftest import shape


L_SHAPE = shape([1, 0], [1, 0], [1, 1])
T_SHAPE = shape([0, 1, 0], [1, 1, 1])


def test_rotate_clockwise_swaps_dimensions():
    rotated = rotate_clockwise(L_SHAPE)
    assert rotated.dimensions == (2, 3)
    assert rotated == shape([1, 1, 1], [1, 0, 0])


def test_rotate_clockwise_direction():
    # out[i][j] = in[R-1-j][i]: the top row ends up as the right-hand column
    s = shape([1, 1, 1], [1, 0, 0])
    assert rotate_clockwise(s) == shape([1, 1], [0, 1], [0, 1])
    # three clockwise turns give the counter-clockwise turn (new row i = old column C-1-i)
    assert apply_rotations(s, 3) == shape([1, 0], [1, 0], [1, 1])
    assert apply_rotations(s, -1) == apply_rotations(s, 3)


def test_rotate_padded_square_shape():
    s = shape([1, 1, 0], [0, 1, 0], [0, 1, 0])
    assert rotate_clockwise(s) == shape([0, 0, 1], [1, 1, 1], [0, 0, 0])


@pytest.mark.parametrize("s", [L_SHAPE, T_SHAPE, shape([1, 1, 1, 1]), shape([1])])
def test_four_rotations_round_trip(s):
    result = s
    for _ in range(4):
        result = rotate_clockwise(result)
    assert result == s
    assert result.dimensions == s.dimensions


@pytest.mark.parametrize("n", range(-4, 8))
def test_apply_rotations_is_mod_4_periodic(n):
    assert apply_rotations(T_SHAPE, n + 4) == apply_rotations(T_SHAPE, n)


def test_apply_zero_rotations_is_identity():
    assert apply_rotations(L_SHAPE, 0) == L_SHAPE


def test_rotation_does_not_touch_original():
    before = L_SHAPE.to_rows()
    rotate_clockwise(L_SHAPE)
    assert L_SHAPE.to_rows() == before


def test_cells_and_count():
    assert list(T_SHAPE.cells()) == [(0, 1), (1, 0), (1, 1), (1, 2)]
    assert T_SHAPE.cell_count == 4


@pytest.mark.parametrize(
    "rows",
    [
        [],
        [[1, 0], [1]],
        [[0, 0], [0, 0]],
        [[1, 2]],
        [[]],
    ],
)
def test_from_rows_rejects_malformed(rows):
    with pytest.raises(ShapeError):
        Shape.from_rows(rows)


def test_trimmed_returns_bounding_box_and_offset():
    box, offset = shape([0, 0, 0], [0, 1, 1], [0, 1, 0]).trimmed()
    assert box == shape([1, 1], [1, 0])
    assert offset == (1, 1)


def test_distinct_rotations():
    assert len(shape([1, 1], [1, 1]).rotations()) == 1
    assert len(shape([1, 1, 1]).rotations()) == 2
    assert len(T_SHAPE.rotations()) == 4


def test_shape_is_read_only():
    with pytest.raises(ValueError):
        L_SHAPE.array[0, 1] = True


def test_equal_shapes_hash_alike():
    assert hash(shape([1, 1])) == hash(Shape(np.array([[True, True]])))
    assert shape([1, 1]) != shape([1], [1])
