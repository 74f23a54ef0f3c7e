"""Runtime grid built from a LevelDescriptor.

This is the state gameplay mutates while a colony grows: walls broken by
explosions, occupied cells, collected nutrients. It is a separate copy,
so the descriptor the solver proved stays untouched.

Explosions here follow the play rules: once armed, the next spawn clears
every orthogonal and diagonal wall around the new cell. The solver only
credits a buff with one wall, entered straight from the buff cell, and
never counts on the extra openings.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Dict, List, Optional

from divide.core.utils import ALL_NEIGHBOR_OFFSETS, ORTHOGONAL_OFFSETS, Coord, is_adjacent
from divide.level.level_data import LevelDescriptor

logger = logging.getLogger(__name__)


@dataclass
class RuntimeTile:
    x: int
    y: int
    walkable: bool = True
    occupied: bool = False
    has_nutrient: bool = False
    has_explosion: bool = False
    portal_partner: Optional[Coord] = None

    @property
    def is_portal(self) -> bool:
        return self.portal_partner is not None


class RuntimeGrid:
    """Per-cell gameplay state for one level."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._tiles: Dict[Coord, RuntimeTile] = {
            (x, y): RuntimeTile(x, y) for x in range(width) for y in range(height)
        }

    @classmethod
    def from_descriptor(cls, descriptor: LevelDescriptor) -> "RuntimeGrid":
        grid = cls(descriptor.width, descriptor.height)
        for pos in descriptor.walls:
            tile = grid.get_tile(pos)
            if tile is not None and pos != descriptor.spawn:
                tile.walkable = False
        for pos in descriptor.nutrients:
            tile = grid.get_tile(pos)
            if tile is not None and tile.walkable:
                tile.has_nutrient = True
        for pos in descriptor.explosion_buffs:
            tile = grid.get_tile(pos)
            if tile is not None and tile.walkable:
                tile.has_explosion = True
        for pair in descriptor.portal_pairs:
            enter, exit_ = grid.get_tile(pair.enter), grid.get_tile(pair.exit)
            if enter is not None and exit_ is not None:
                enter.portal_partner = pair.exit
                exit_.portal_partner = pair.enter
        return grid

    def get_tile(self, pos: Coord) -> Optional[RuntimeTile]:
        return self._tiles.get(pos)

    def neighbors(self, pos: Coord, include_diagonals: bool = False) -> List[RuntimeTile]:
        offsets = ALL_NEIGHBOR_OFFSETS if include_diagonals else ORTHOGONAL_OFFSETS
        out = []
        for dx, dy in offsets:
            tile = self._tiles.get((pos[0] + dx, pos[1] + dy))
            if tile is not None:
                out.append(tile)
        return out

    def clear_wall(self, pos: Coord) -> None:
        tile = self._tiles.get(pos)
        if tile is not None:
            tile.walkable = True

    def explode(self, center: Coord) -> List[Coord]:
        """Clear every wall around center (8-way). Returns the cells opened."""
        opened = []
        for tile in self.neighbors(center, include_diagonals=True):
            if not tile.walkable:
                tile.walkable = True
                opened.append((tile.x, tile.y))
        logger.debug("Explosion at %s opened %s", center, opened)
        return opened

    def remaining_nutrients(self) -> int:
        return sum(1 for t in self._tiles.values() if t.has_nutrient)


class Outcome(Enum):
    IN_PROGRESS = "in_progress"
    WIN = "win"
    LOSE = "lose"


class ColonyTracker:
    """
    Counts growth moves against the level capacity and reports the end of a level.

    The first cell is placed on spawn for free; every later spawn costs one
    unit of capacity, matching the solver's move count. Collecting the last
    nutrient reports WIN; trying to grow with the capacity used up reports
    LOSE.
    """

    def __init__(
        self,
        descriptor: LevelDescriptor,
        on_win: Optional[Callable[[], None]] = None,
        on_lose: Optional[Callable[[], None]] = None,
    ) -> None:
        self.descriptor = descriptor
        self.grid = RuntimeGrid.from_descriptor(descriptor)
        self.capacity = descriptor.capacity
        self.total_nutrients = len(set(descriptor.nutrients))
        self.used = 0
        self.nutrients_collected = 0
        self.explosion_armed = False
        self.colony: List[Coord] = []
        self.outcome = Outcome.IN_PROGRESS
        self._on_win = on_win
        self._on_lose = on_lose

    @property
    def remaining_capacity(self) -> int:
        return self.capacity - self.used

    def start(self) -> Outcome:
        """Place the first cell on spawn."""
        if self.colony:
            return self.outcome
        self._occupy(self.descriptor.spawn)
        return self.outcome

    def grow(self, target: Coord) -> Outcome:
        """
        Spawn into `target` from an adjacent colony cell.

        Growing onto a portal endpoint lands the new cell on its partner.
        Illegal targets are ignored and leave the outcome unchanged.
        """
        if self.outcome is not Outcome.IN_PROGRESS or not self.colony:
            return self.outcome
        tile = self.grid.get_tile(target)
        if tile is None or not tile.walkable or tile.occupied:
            return self.outcome
        if not any(is_adjacent(target, cell) for cell in self.colony):
            return self.outcome

        landing = target
        if tile.is_portal:
            partner = self.grid.get_tile(tile.portal_partner)
            if partner is None or not partner.walkable or partner.occupied:
                return self.outcome
            landing = tile.portal_partner

        if self.used >= self.capacity:
            logger.info("Petri dish is full! Capacity: %d. Game Over!", self.capacity)
            self._finish(Outcome.LOSE)
            return self.outcome

        armed = self.explosion_armed
        self.used += 1
        if armed:
            self.explosion_armed = False
        self._occupy(landing)
        if armed:
            self.grid.explode(landing)
        return self.outcome

    def _occupy(self, pos: Coord) -> None:
        tile = self.grid.get_tile(pos)
        tile.occupied = True
        self.colony.append(pos)

        if tile.has_explosion:
            tile.has_explosion = False
            self.explosion_armed = True
            logger.debug("Explosion buff collected at %s", pos)

        if tile.has_nutrient:
            tile.has_nutrient = False
            self.nutrients_collected += 1
            logger.debug("Nutrient collected! Total: %d/%d", self.nutrients_collected, self.total_nutrients)

        if self.nutrients_collected >= self.total_nutrients:
            self._finish(Outcome.WIN)

    def _finish(self, outcome: Outcome) -> None:
        if self.outcome is not Outcome.IN_PROGRESS:
            return
        self.outcome = outcome
        callback = self._on_win if outcome is Outcome.WIN else self._on_lose
        if callback is not None:
            callback()
