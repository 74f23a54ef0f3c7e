"""Feature placement: nutrients, explosion buffs and portal pairs.

All finders work on the shrinking pool of coordinates that have not been
assigned to spawn or another feature yet. Finders only *choose* a cell;
`claim_position` removes it from the pool and opens it on the grid.

Every finder returns None once the pool is empty, which the generator
treats as placement exhaustion (non-fatal, fewer features are placed).
"""

import logging
import random
from typing import List, Optional, Sequence, Tuple

from config import (
    BUFF_SHORTLIST_SIZE,
    DISTANT_SHORTLIST_SIZE,
    LARGE_GRID_THRESHOLD,
    MIN_NUTRIENT_SPACING,
    NUTRIENT_SHORTLIST_SIZE,
    NUTRIENT_SPAWN_DISTANCE_LARGE,
    NUTRIENT_SPAWN_DISTANCE_SMALL,
)
from divide.core.utils import Coord, manhattan_distance
from divide.level.maze_carver import find_regions
from divide.level.wall_grid import WallGrid

logger = logging.getLogger(__name__)


def pop_random_position(pool: List[Coord], rng: random.Random) -> Optional[Coord]:
    """Uniform pick with removal. Returns None when the pool is empty."""
    if not pool:
        return None
    return pool.pop(rng.randrange(len(pool)))


def claim_position(pool: List[Coord], grid: WallGrid, pos: Coord) -> None:
    """Mark pos as taken: drop it from the pool and make sure it is open."""
    if pos in pool:
        pool.remove(pos)
    grid.clear(*pos)


def min_spawn_distance(width: int, height: int) -> int:
    if width >= LARGE_GRID_THRESHOLD or height >= LARGE_GRID_THRESHOLD:
        return NUTRIENT_SPAWN_DISTANCE_LARGE
    return NUTRIENT_SPAWN_DISTANCE_SMALL


def find_hard_to_reach_position(
    pool: List[Coord],
    grid: WallGrid,
    spawn: Coord,
    nutrients: Sequence[Coord],
    has_explosions: bool,
    rng: random.Random,
    shortlist_size: int = NUTRIENT_SHORTLIST_SIZE,
) -> Optional[Coord]:
    """
    Pick a nutrient cell that is far from spawn or tucked against walls.

    Candidates must be at least `min_spawn_distance` from spawn and
    MIN_NUTRIENT_SPACING from every placed nutrient. When the level has
    explosion buffs only wall-adjacent cells qualify (so a buff can unlock
    them) and they are ranked by adjacent wall count; otherwise they are
    ranked by distance from spawn. One of the top `shortlist_size` is chosen
    at random.

    Falls back to a random pool cell (removed from the pool) when nothing
    qualifies.
    """
    min_dist = min_spawn_distance(grid.width, grid.height)

    candidates: List[Tuple[Coord, int]] = []
    for pos in pool:
        if pos == spawn or manhattan_distance(pos, spawn) < min_dist:
            continue
        if any(manhattan_distance(pos, n) < MIN_NUTRIENT_SPACING for n in nutrients):
            continue
        wall_count = grid.count_adjacent_walls(pos)
        if has_explosions and wall_count < 1:
            continue
        candidates.append((pos, wall_count))

    if has_explosions:
        candidates.sort(key=lambda c: c[1], reverse=True)
    else:
        candidates.sort(key=lambda c: manhattan_distance(c[0], spawn), reverse=True)
    shortlist = candidates[:shortlist_size]

    if not shortlist:
        logger.debug("No hard-to-reach candidate, falling back to random pick")
        return pop_random_position(pool, rng)
    return rng.choice(shortlist)[0]


def find_strategic_position(
    pool: List[Coord],
    grid: WallGrid,
    nutrients: Sequence[Coord],
    rng: random.Random,
    shortlist_size: int = BUFF_SHORTLIST_SIZE,
) -> Optional[Coord]:
    """
    Pick an explosion-buff cell next to a wall that borders a nutrient.

    Triggering the buff there plausibly opens a way to the nutrient. Cells
    within distance 1 of a nutrient are never used. Falls back to any
    wall-adjacent cell, then to a random pick.
    """
    if not nutrients:
        return pop_random_position(pool, rng)

    # walls that block paths to nutrients
    valuable_walls = {
        n for nutrient in nutrients for n in grid.orthogonal_neighbors(nutrient)
        if grid.is_wall(*n)
    }

    strategic: List[Tuple[Coord, int]] = []
    fallback: List[Tuple[Coord, int]] = []
    for pos in pool:
        if any(manhattan_distance(pos, n) <= 1 for n in nutrients):
            continue
        wall_count = grid.count_adjacent_walls(pos)
        if wall_count == 0:
            continue
        fallback.append((pos, wall_count))
        if any(manhattan_distance(pos, w) == 1 for w in valuable_walls):
            strategic.append((pos, wall_count))

    candidates = strategic or fallback
    candidates.sort(key=lambda c: c[1], reverse=True)
    shortlist = candidates[:shortlist_size]

    if not shortlist:
        return pop_random_position(pool, rng)
    return rng.choice(shortlist)[0]


def find_distant_position(
    pool: List[Coord],
    reference: Coord,
    rng: random.Random,
    shortlist_size: int = DISTANT_SHORTLIST_SIZE,
    exclude: Optional[Coord] = None,
) -> Optional[Coord]:
    """Random pick among the `shortlist_size` pool cells farthest from reference."""
    candidates = [p for p in pool if p != exclude]
    if not candidates:
        return None
    candidates.sort(key=lambda p: manhattan_distance(p, reference), reverse=True)
    return rng.choice(candidates[:shortlist_size])


def find_portal_pair(
    pool: List[Coord],
    grid: WallGrid,
    spawn: Coord,
    rng: random.Random,
) -> Optional[Tuple[Coord, Coord]]:
    """
    Choose both ends of a portal pair.

    Prefers two different flood-fill regions of the current wall layout so
    the portal bridges areas that are otherwise separate. Only free pool
    cells are eligible. If the layout has a single usable region, picks a
    cell far from spawn and a second cell far from the first.

    Returns:
        (enter, exit) or None if fewer than two cells are free
    """
    if len(pool) < 2:
        return None

    free = set(pool)
    regions = [[p for p in region if p in free] for region in find_regions(grid)]
    regions = [r for r in regions if r]

    if len(regions) > 1:
        first, second = rng.sample(range(len(regions)), 2)
        enter = rng.choice(regions[first])
        exit_ = rng.choice(regions[second])
        logger.debug("Portal bridges regions %d and %d: %s <-> %s", first, second, enter, exit_)
        return enter, exit_

    enter = find_distant_position(pool, spawn, rng)
    if enter is None:
        return None
    exit_ = find_distant_position(pool, enter, rng, exclude=enter)
    if exit_ is None:
        return None
    return enter, exit_
