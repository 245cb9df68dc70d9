import pytest

from qrsvg.matrix import ModuleMatrix, QRMatrix, encode_matrix, is_finder_region


def test_from_strings():
    m = ModuleMatrix.from_strings(["#.", ".#"])
    assert m.module_count == 2
    assert m.is_dark(0, 0) and m.is_dark(1, 1)
    assert not m.is_dark(0, 1)
    assert isinstance(m, QRMatrix)


def test_non_square_rejected():
    with pytest.raises(ValueError):
        ModuleMatrix([[True, False], [True]])


@pytest.mark.parametrize("row,col,expected", [
    (0, 0, True),
    (7, 7, True),
    (8, 8, False),
    (0, 13, True),
    (7, 20, True),
    (13, 0, True),
    (20, 7, True),
    (20, 20, False),
    (13, 20, False),
    (10, 10, False),
])
def test_finder_regions(row, col, expected):
    assert is_finder_region(row, col, 21) is expected


def test_encode_version_one():
    m = encode_matrix("hello", ecc="L", version=1)
    assert m.module_count == 21
    # finder pattern: dark ring, light ring, dark 3x3 centre
    assert m.is_dark(0, 0)
    assert not m.is_dark(1, 1)
    assert m.is_dark(3, 3)
    assert m.is_dark(0, 20)
    assert not m.is_dark(7, 7)


def test_encode_grows_with_data():
    small = encode_matrix("https://example.com")
    large = encode_matrix("https://example.com/" + "x" * 200)
    assert large.module_count > small.module_count
    assert (small.module_count - 17) % 4 == 0
