import base64
import io
import logging

import pytest
from PIL import Image

from qrsvg.logging import NAMESPACE
from qrsvg.matrix import ModuleMatrix


def blank_rows(n: int) -> list[list[bool]]:
    return [[False] * n for _ in range(n)]


def matrix_with(n: int, dark_cells) -> ModuleMatrix:
    """n x n all-light matrix with the given (row, col) cells dark."""
    rows = blank_rows(n)
    for row, col in dark_cells:
        rows[row][col] = True
    return ModuleMatrix(rows)


def full_matrix(n: int) -> ModuleMatrix:
    return ModuleMatrix([[True] * n for _ in range(n)])


def png_bytes(size=(8, 8), color=(255, 0, 0, 255)) -> bytes:
    out = io.BytesIO()
    Image.new("RGBA", size, color).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def red_png() -> bytes:
    return png_bytes()


@pytest.fixture
def red_png_data_url(red_png) -> str:
    return "data:image/png;base64," + base64.b64encode(red_png).decode("ascii")


@pytest.fixture(autouse=True)
def _reset_qrsvg_logging():
    """CLI tests attach stream handlers; drop them between tests."""
    yield
    root = logging.getLogger(NAMESPACE)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
