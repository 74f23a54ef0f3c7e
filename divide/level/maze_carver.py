"""Maze carving for puzzle levels.

This module:
- Carves a connected maze from the spawn cell with a randomized
  growing-tree walk (2-cell stride, explicit stack, backtracks from dead ends)
- Sprinkles a few extra walls for texture, reverting all of them if any
  previously open cell gets cut off from spawn
- Guarantees spawn has at least one open orthogonal neighbour

Flood-fill helpers used by feature placement also live here.
"""

import logging
import random
from typing import Iterable, List, Set

from config import EXTRA_WALL_CHANCE
from divide.core.utils import Coord
from divide.level.wall_grid import WallGrid

logger = logging.getLogger(__name__)

# Carving moves two cells at a time so a wall stays between corridors
_CARVE_STEPS = ((0, 2), (0, -2), (2, 0), (-2, 0))


def carve_maze(
    grid: WallGrid,
    spawn: Coord,
    rng: random.Random,
    extra_wall_chance: float = EXTRA_WALL_CHANCE,
) -> None:
    """
    Carve the maze in place.

    Args:
        grid: Working grid, normally filled with walls
        spawn: Start of the carve; always left open
        rng: Random source
        extra_wall_chance: Chance per open cell to become a texture wall
    """
    _carve_growing_tree(grid, spawn, rng)

    open_positions = grid.open_cells()
    added_walls = _add_extra_walls(grid, spawn, rng, extra_wall_chance)

    if added_walls and not ensure_connectivity(grid, spawn, open_positions):
        logger.warning("Random walls blocked connectivity. Reverting %d walls.", len(added_walls))
        for x, y in added_walls:
            grid.clear(x, y)

    ensure_open_neighbor(grid, spawn, rng)


def _carve_growing_tree(grid: WallGrid, start: Coord, rng: random.Random) -> None:
    grid.clear(*start)
    stack: List[Coord] = [start]

    while stack:
        cx, cy = stack[-1]
        steps = list(_CARVE_STEPS)
        rng.shuffle(steps)

        for dx, dy in steps:
            nx, ny = cx + dx, cy + dy
            if grid.is_in_bounds(nx, ny) and grid.is_wall(nx, ny):
                grid.clear(nx, ny)
                grid.clear(cx + dx // 2, cy + dy // 2)
                stack.append((nx, ny))
                break
        else:
            # dead end
            stack.pop()


def _add_extra_walls(grid: WallGrid, spawn: Coord, rng: random.Random, chance: float) -> List[Coord]:
    added: List[Coord] = []
    for x in range(grid.width):
        for y in range(grid.height):
            if grid.is_open(x, y) and rng.random() < chance and (x, y) != spawn:
                grid.set_wall(x, y)
                added.append((x, y))
    return added


def flood_fill_reachable(grid: WallGrid, start: Coord) -> Set[Coord]:
    """Return set of open cells reachable from start using 4-way movement."""
    if not grid.is_in_bounds(*start) or grid.is_wall(*start):
        return set()

    q = [start]
    seen = {start}
    for pos in q:
        for nxt in grid.orthogonal_neighbors(pos):
            if nxt not in seen and grid.is_open(*nxt):
                seen.add(nxt)
                q.append(nxt)
    return seen


def ensure_connectivity(grid: WallGrid, start: Coord, key_positions: Iterable[Coord]) -> bool:
    """
    Check that every key position that is still open can be reached from start.

    Key positions that have since turned into walls are not required to be
    reachable; the caller decides whether to revert them.
    """
    reachable = flood_fill_reachable(grid, start)
    for x, y in key_positions:
        if grid.is_open(x, y) and (x, y) not in reachable:
            return False
    return True


def find_regions(grid: WallGrid) -> List[List[Coord]]:
    """Split the open cells into 4-connected regions."""
    regions: List[List[Coord]] = []
    visited: Set[Coord] = set()

    for x in range(grid.width):
        for y in range(grid.height):
            if grid.is_wall(x, y) or (x, y) in visited:
                continue
            region = [(x, y)]
            visited.add((x, y))
            for pos in region:
                for nxt in grid.orthogonal_neighbors(pos):
                    if nxt not in visited and grid.is_open(*nxt):
                        visited.add(nxt)
                        region.append(nxt)
            regions.append(region)
    return regions


def ensure_open_neighbor(grid: WallGrid, spawn: Coord, rng: random.Random) -> None:
    """Clear a random orthogonal neighbour of spawn if all of them are walls."""
    neighbors = grid.orthogonal_neighbors(spawn)
    if not neighbors or any(grid.is_open(*n) for n in neighbors):
        return
    x, y = rng.choice(neighbors)
    logger.debug("Spawn %s was sealed in, opening (%d, %d)", spawn, x, y)
    grid.clear(x, y)
