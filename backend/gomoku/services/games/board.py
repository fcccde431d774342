from typing import List, Optional, Tuple

BOARD_SIZE = 18
WIN_LENGTH = 5

# Scan order matters only for which line is reported when one move
# completes several at once.
DIRECTIONS = (
    (1, 0),   # vertical
    (0, 1),   # horizontal
    (1, 1),   # diagonal down-right
    (1, -1),  # diagonal down-left
)

Cell = Tuple[int, int]


class Board:
    """Square grid of marks with five-in-a-row detection.

    Cells hold ``None`` or a mark string. The board does not validate moves;
    the owning room checks bounds, occupancy and turn order before calling
    :meth:`place`.
    """

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self.cells = [[None] * size for _ in range(size)]

    @classmethod
    def create(cls) -> 'Board':
        return cls(BOARD_SIZE)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, row: int, col: int) -> Optional[str]:
        return self.cells[row][col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.cells[row][col] is None

    def place(self, row: int, col: int, mark: str) -> None:
        self.cells[row][col] = mark

    def check_win(self, row: int, col: int, mark: str) -> Optional[List[Cell]]:
        """Return the winning line through ``(row, col)`` or ``None``.

        The list starts with the played cell, followed by the run in the
        positive direction and then the run in the negative direction.
        """
        for dr, dc in DIRECTIONS:
            line = self._line(row, col, mark, dr, dc)
            if len(line) >= WIN_LENGTH:
                return line
        return None

    def _line(self, row: int, col: int, mark: str, dr: int, dc: int) -> List[Cell]:
        cells = [(row, col)]
        for sign in (1, -1):
            r, c = row + sign * dr, col + sign * dc
            while self.in_bounds(r, c) and self.cells[r][c] == mark:
                cells.append((r, c))
                r += sign * dr
                c += sign * dc
        return cells

    def to_list(self) -> List[List[Optional[str]]]:
        return [list(r) for r in self.cells]
