"""QR bit matrix: the read-only grid the renderer consumes, plus a qrcode-backed encoder."""

from enum import Enum
from typing import Protocol, Sequence, runtime_checkable

import qrcode
import qrcode.constants

from qrsvg.config import FINDER_REGION
from qrsvg.logging import audit, get_logger, trace

log = get_logger("matrix")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


@runtime_checkable
class QRMatrix(Protocol):
    """Square grid of dark/light modules, 0-indexed."""

    @property
    def module_count(self) -> int: ...

    def is_dark(self, row: int, col: int) -> bool: ...


class ModuleMatrix:
    """QRMatrix over a nested boolean sequence (True = dark)."""

    def __init__(self, modules: Sequence[Sequence[bool]]):
        self._modules = tuple(tuple(bool(v) for v in row) for row in modules)
        n = len(self._modules)
        if any(len(row) != n for row in self._modules):
            raise ValueError("module matrix must be square")

    @property
    def module_count(self) -> int:
        return len(self._modules)

    def is_dark(self, row: int, col: int) -> bool:
        return self._modules[row][col]

    @classmethod
    def from_strings(cls, rows: Sequence[str], dark: str = "#") -> "ModuleMatrix":
        """Build from text rows, e.g. ``["#.#", ".#.", "#.#"]``."""
        return cls([[ch == dark for ch in row] for row in rows])

    def __repr__(self) -> str:
        return f"ModuleMatrix({self.module_count}x{self.module_count})"


def is_finder_region(row: int, col: int, module_count: int) -> bool:
    """True for cells inside a finder pattern or its separator (8x8 corner blocks).

    Only the top-left, top-right and bottom-left corners carry finders.
    """
    if row < FINDER_REGION and col < FINDER_REGION:
        return True
    if row < FINDER_REGION and col >= module_count - FINDER_REGION:
        return True
    if row >= module_count - FINDER_REGION and col < FINDER_REGION:
        return True
    return False


@trace
def encode_matrix(
    data: str,
    ecc: str = "H",
    version: int | None = None,
    mask: int | None = None,
) -> ModuleMatrix:
    """Encode *data* with the qrcode library and return its module matrix.

    Args:
        data: The string to encode (URL, text, etc.)
        ecc: Error correction level: L/M/Q/H
        version: QR version 1-40 (None = smallest that fits)
        mask: Mask pattern 0-7 (None = auto-select best)

    Returns:
        ModuleMatrix without a quiet zone; the renderer adds its own margin.
    """
    ecc_level = ECC_NAMES[ecc.upper()]
    qr = qrcode.QRCode(
        version=version,
        error_correction=ecc_level.value,
        box_size=1,
        border=0,
        mask_pattern=mask,
    )
    qr.add_data(data)
    qr.make(fit=(version is None))

    matrix = ModuleMatrix(qr.modules)
    audit("qr.encoded", logger=log,
          data=data[:80], version=qr.version,
          size=f"{matrix.module_count}x{matrix.module_count}",
          ecc=ecc.upper(), mask=mask if mask is not None else "auto")
    return matrix
