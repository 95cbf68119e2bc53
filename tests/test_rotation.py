import pytest

from imgcompare import ConfigError, RotationAngle

SIZE = 8
CELLS = [(x, y) for y in range(SIZE) for x in range(SIZE)]


def test_identity():
    assert RotationAngle.D0.rotate_pixel(3, 5, SIZE, SIZE) == (3, 5)


@pytest.mark.parametrize(
    "angle, expected",
    [
        (RotationAngle.D90, (7, 0)),
        (RotationAngle.D180, (7, 7)),
        (RotationAngle.D270, (0, 7)),
    ],
)
def test_corner_mapping(angle, expected):
    assert angle.rotate_pixel(0, 0, SIZE, SIZE) == expected


def test_formulas():
    x, y = 2, 5
    assert RotationAngle.D90.rotate_pixel(x, y, SIZE, SIZE) == (SIZE - 1 - y, x)
    assert RotationAngle.D180.rotate_pixel(x, y, SIZE, SIZE) == (SIZE - 1 - x, SIZE - 1 - y)
    assert RotationAngle.D270.rotate_pixel(x, y, SIZE, SIZE) == (y, SIZE - 1 - x)


def test_quarter_turn_four_times_is_identity():
    for cell in CELLS:
        x, y = cell
        for _ in range(4):
            x, y = RotationAngle.D90.rotate_pixel(x, y, SIZE, SIZE)
        assert (x, y) == cell


@pytest.mark.parametrize("angle", list(RotationAngle))
def test_every_angle_is_a_bijection(angle):
    mapped = {angle.rotate_pixel(x, y, SIZE, SIZE) for x, y in CELLS}
    assert mapped == set(CELLS)


def test_coerce():
    assert RotationAngle.coerce(90) is RotationAngle.D90
    assert RotationAngle.coerce(RotationAngle.D270) is RotationAngle.D270
    with pytest.raises(ConfigError):
        RotationAngle.coerce(45)
    with pytest.raises(ConfigError):
        RotationAngle.coerce("sideways")
