from dataclasses import dataclass, field
from typing import Iterable, List, Set

from divide.core.utils import Coord, orthogonal_neighbors


@dataclass
class WallGrid:
    """
    Mutable working grid used while a level is being generated.

    Cells are stored row-major as ``cells[y][x]``; ``True`` means wall.
    The grid is local to one generation attempt and is never shared with
    the descriptor handed to gameplay.

    Attributes:
        width: Grid width in cells
        height: Grid height in cells
        cells: 2D list of wall flags
    """
    width: int
    height: int
    cells: List[List[bool]] = field(default_factory=list)

    def __post_init__(self):
        if not self.cells:
            self.cells = [[False] * self.width for _ in range(self.height)]

    @classmethod
    def filled(cls, width: int, height: int) -> "WallGrid":
        """Grid with every cell set to wall (carving starts from here)."""
        return cls(width, height, [[True] * width for _ in range(height)])

    @classmethod
    def from_walls(cls, width: int, height: int, walls: Iterable[Coord]) -> "WallGrid":
        grid = cls(width, height)
        for x, y in walls:
            if grid.is_in_bounds(x, y):
                grid.cells[y][x] = True
        return grid

    def is_in_bounds(self, x: int, y: int) -> bool:
        """Check if coordinate is within grid bounds."""
        return 0 <= x < self.width and 0 <= y < self.height

    def is_wall(self, x: int, y: int) -> bool:
        """Out-of-bounds coordinates are reported as walls."""
        if not self.is_in_bounds(x, y):
            return True
        return self.cells[y][x]

    def is_open(self, x: int, y: int) -> bool:
        return not self.is_wall(x, y)

    def set_wall(self, x: int, y: int, wall: bool = True) -> None:
        if self.is_in_bounds(x, y):
            self.cells[y][x] = wall

    def clear(self, x: int, y: int) -> None:
        self.set_wall(x, y, False)

    def orthogonal_neighbors(self, pos: Coord) -> List[Coord]:
        return list(orthogonal_neighbors(pos, self.width, self.height))

    def count_adjacent_walls(self, pos: Coord) -> int:
        """Count in-bounds orthogonal neighbours that are walls."""
        return sum(1 for nx, ny in orthogonal_neighbors(pos, self.width, self.height)
                   if self.cells[ny][nx])

    def open_cells(self) -> List[Coord]:
        """All open cells in column-major order (x outer, y inner)."""
        return [(x, y) for x in range(self.width) for y in range(self.height)
                if not self.cells[y][x]]

    def wall_set(self) -> Set[Coord]:
        return {(x, y) for x in range(self.width) for y in range(self.height)
                if self.cells[y][x]}

    def copy(self) -> "WallGrid":
        return WallGrid(self.width, self.height, [row[:] for row in self.cells])

    def __repr__(self) -> str:
        rows = ["".join("#" if c else "." for c in row) for row in self.cells]
        return f"WallGrid({self.width}x{self.height}, rows={rows})"
