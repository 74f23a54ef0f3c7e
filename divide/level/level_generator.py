"""Puzzle level generator.

Pipeline for one attempt:
    carve maze -> place nutrients, explosion buffs, portals
    -> validate -> prove solvable -> LevelDescriptor

Any failure aborts the attempt and yields None; no partial grid escapes.
`generate_level_with_retries` wraps attempts in the bounded retry loop the
game uses before treating generation as fatal.
"""

import logging
import random
from typing import List, Optional

from divide.core.utils import Coord
from divide.level.config_loader import GenerationConfig
from divide.level.feature_placement import (
    claim_position,
    find_hard_to_reach_position,
    find_portal_pair,
    find_strategic_position,
    pop_random_position,
)
from divide.level.level_data import LevelDescriptor, LevelLayout, PortalPair
from divide.level.level_validator import validate_level
from divide.level.maze_carver import carve_maze
from divide.level.solvability import analyze_level
from divide.level.wall_grid import WallGrid

logger = logging.getLogger(__name__)


class LevelGenerator:
    """
    Builds solvable puzzle levels.

    Holds no state between attempts besides its configuration and random
    source; pass a seeded `random.Random` for reproducible output.
    """

    def __init__(self, config: Optional[GenerationConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GenerationConfig()
        self.rng = rng or random.Random()

    def generate_level(
        self,
        width: int,
        height: int,
        nutrient_count: int,
        explosion_buff_count: int,
        portal_pair_count: int,
        leniency: int,
    ) -> Optional[LevelDescriptor]:
        """
        Run one generation attempt.

        Returns:
            The validated descriptor, or None if the attempt failed
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        level = self._create_puzzle_level(
            width, height,
            max(0, nutrient_count),
            max(0, explosion_buff_count),
            max(0, portal_pair_count),
            max(0, leniency),
        )
        if level is None:
            logger.error("Failed to generate a solvable puzzle level.")
            return None

        logger.info("Generated puzzle level. Optimal moves: %d, Player capacity: %d",
                    level.optimal_moves, level.capacity)
        return level

    def generate_level_with_retries(
        self,
        width: int,
        height: int,
        nutrient_count: int,
        explosion_buff_count: int,
        portal_pair_count: int,
        leniency: int,
        max_attempts: Optional[int] = None,
    ) -> Optional[LevelDescriptor]:
        """Retry with fresh randomness; None after `max_attempts` failures."""
        attempts = max_attempts if max_attempts is not None else self.config.max_generation_attempts
        for attempt in range(1, attempts + 1):
            level = self.generate_level(width, height, nutrient_count, explosion_buff_count,
                                        portal_pair_count, leniency)
            if level is not None:
                return level
            logger.warning("Level generation failed, attempt %d/%d", attempt, attempts)

        logger.error("FATAL: Could not generate a valid level after %d attempts.", attempts)
        return None

    # ----- one attempt -----

    def _create_puzzle_level(
        self,
        width: int,
        height: int,
        nutrient_count: int,
        explosion_buff_count: int,
        portal_pair_count: int,
        leniency: int,
    ) -> Optional[LevelDescriptor]:
        rng = self.rng
        grid = WallGrid.filled(width, height)
        pool: List[Coord] = [(x, y) for x in range(width) for y in range(height)]

        spawn = pop_random_position(pool, rng)
        if spawn is None:
            return None
        grid.clear(*spawn)

        carve_maze(grid, spawn, rng, self.config.extra_wall_chance)

        nutrients = self._place_nutrients(pool, grid, spawn, nutrient_count, explosion_buff_count > 0)
        explosions = self._place_explosion_buffs(pool, grid, nutrients, explosion_buff_count)
        portals = self._place_portals(pool, grid, spawn, portal_pair_count)

        layout = LevelLayout(
            width=width,
            height=height,
            spawn=spawn,
            walls=frozenset(grid.wall_set()),
            nutrients=tuple(nutrients),
            explosion_buffs=frozenset(explosions),
            portal_pairs=tuple(portals),
        )
        return self.finalize_level(layout, leniency, grid)

    def finalize_level(
        self, layout: LevelLayout, leniency: int, grid: Optional[WallGrid] = None
    ) -> Optional[LevelDescriptor]:
        """
        Validate a layout, prove it solvable and price it.

        Args:
            layout: Tentative level
            leniency: Extra moves granted on top of the optimal route
            grid: Working wall grid; rebuilt from layout.walls when omitted

        Returns:
            LevelDescriptor with capacity = optimal moves + leniency, or None
        """
        validation = validate_level(layout, grid)
        if not validation:
            logger.error("Level validation failed.")
            return None

        report = analyze_level(layout)
        if not report.solvable:
            logger.error("Generated an unsolvable level (no path between %s and %s).",
                         *report.unreachable_pair)
            return None

        return LevelDescriptor(
            width=layout.width,
            height=layout.height,
            spawn=layout.spawn,
            walls=layout.walls,
            nutrients=layout.nutrients,
            explosion_buffs=layout.explosion_buffs,
            portal_pairs=layout.portal_pairs,
            capacity=report.optimal_moves + leniency,
            leniency=leniency,
        )

    def _place_nutrients(
        self, pool: List[Coord], grid: WallGrid, spawn: Coord, count: int, has_explosions: bool
    ) -> List[Coord]:
        nutrients: List[Coord] = []
        count = min(count, len(pool))
        for _ in range(count):
            pos = find_hard_to_reach_position(
                pool, grid, spawn, nutrients, has_explosions, self.rng,
                shortlist_size=self.config.nutrient_shortlist_size,
            )
            if pos is None:
                logger.warning("Ran out of cells after %d/%d nutrients", len(nutrients), count)
                break
            nutrients.append(pos)
            claim_position(pool, grid, pos)
        return nutrients

    def _place_explosion_buffs(
        self, pool: List[Coord], grid: WallGrid, nutrients: List[Coord], count: int
    ) -> List[Coord]:
        explosions: List[Coord] = []
        count = min(count, len(pool))
        for _ in range(count):
            pos = find_strategic_position(
                pool, grid, nutrients, self.rng,
                shortlist_size=self.config.buff_shortlist_size,
            )
            if pos is None:
                logger.warning("Ran out of cells after %d/%d explosion buffs", len(explosions), count)
                break
            explosions.append(pos)
            claim_position(pool, grid, pos)
        return explosions

    def _place_portals(self, pool: List[Coord], grid: WallGrid, spawn: Coord, count: int) -> List[PortalPair]:
        portals: List[PortalPair] = []
        count = min(count, len(pool) // 2)
        for _ in range(count):
            ends = find_portal_pair(pool, grid, spawn, self.rng)
            if ends is None:
                logger.warning("Ran out of cells after %d/%d portal pairs", len(portals), count)
                break
            enter, exit_ = ends
            claim_position(pool, grid, enter)
            claim_position(pool, grid, exit_)
            portals.append(PortalPair(enter=enter, exit=exit_))
        return portals


def generate_level(
    width: int,
    height: int,
    nutrient_count: int,
    explosion_buff_count: int,
    portal_pair_count: int,
    leniency: int,
    rng: Optional[random.Random] = None,
    config: Optional[GenerationConfig] = None,
) -> Optional[LevelDescriptor]:
    """Single attempt with a throwaway generator. None means no solvable level."""
    return LevelGenerator(config=config, rng=rng).generate_level(
        width, height, nutrient_count, explosion_buff_count, portal_pair_count, leniency
    )
