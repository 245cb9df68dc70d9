"""Cell geometry and occupancy over a QR matrix.

All "is this cell drawn as a data module?" decisions live here so the path
loop and the neighbour lookup always agree on finder and logo exclusion.
"""

from dataclasses import dataclass

from qrsvg.logo import LogoExclusionArea, is_cell_excluded
from qrsvg.matrix import QRMatrix, is_finder_region
from qrsvg.paths import Neighbors


@dataclass(frozen=True)
class CellGrid:
    matrix: QRMatrix
    cell_size: float
    margin: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    exclusion: LogoExclusionArea | None = None

    @property
    def module_count(self) -> int:
        return self.matrix.module_count

    def origin(self, row: int, col: int) -> tuple[float, float]:
        """Top-left corner of a cell in output coordinates."""
        return (
            self.margin + col * self.cell_size + self.offset_x,
            self.margin + row * self.cell_size + self.offset_y,
        )

    def is_finder(self, row: int, col: int) -> bool:
        return is_finder_region(row, col, self.module_count)

    def is_excluded(self, row: int, col: int) -> bool:
        x, y = self.origin(row, col)
        return is_cell_excluded(x, y, self.cell_size, self.exclusion)

    def is_filled(self, row: int, col: int) -> bool:
        """Dark, on the grid, and rendered as a data module."""
        n = self.module_count
        if not (0 <= row < n and 0 <= col < n):
            return False
        return (
            self.matrix.is_dark(row, col)
            and not self.is_finder(row, col)
            and not self.is_excluded(row, col)
        )

    def neighbors(self, row: int, col: int) -> Neighbors:
        return Neighbors(
            top=self.is_filled(row - 1, col),
            right=self.is_filled(row, col + 1),
            bottom=self.is_filled(row + 1, col),
            left=self.is_filled(row, col - 1),
        )

    def data_cells(self):
        """Yield (row, col, x, y, neighbors) for every data module to draw, row-major."""
        for row in range(self.module_count):
            for col in range(self.module_count):
                if self.is_filled(row, col):
                    x, y = self.origin(row, col)
                    yield row, col, x, y, self.neighbors(row, col)
