from typing import Iterator, Tuple

Coord = Tuple[int, int]

# (dx, dy) for 4-way movement
ORTHOGONAL_OFFSETS: Tuple[Coord, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))

# 8-way ring, row by row from the top-left
ALL_NEIGHBOR_OFFSETS: Tuple[Coord, ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


def manhattan_distance(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def in_bounds(pos: Coord, width: int, height: int) -> bool:
    return 0 <= pos[0] < width and 0 <= pos[1] < height


def orthogonal_neighbors(pos: Coord, width: int, height: int) -> Iterator[Coord]:
    """Yield the in-bounds 4-way neighbours of pos."""
    x, y = pos
    for dx, dy in ORTHOGONAL_OFFSETS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            yield (nx, ny)


def is_adjacent(a: Coord, b: Coord) -> bool:
    return manhattan_distance(a, b) == 1
