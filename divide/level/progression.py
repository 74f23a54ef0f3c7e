"""Endless-mode difficulty curve.

Level N gets a slightly larger grid, a nutrient every few levels, an
explosion buff on even levels, a portal pair every third level and a
shrinking leniency. All counts stay inside the solver's caps.
"""

from dataclasses import dataclass
import logging
import random
from typing import Optional

import config as defaults
from divide.level.config_loader import GenerationConfig
from divide.level.level_data import LevelSet
from divide.level.level_generator import LevelGenerator

logger = logging.getLogger(__name__)


class LevelGenerationError(RuntimeError):
    """Raised when a level could not be generated within the retry budget."""


@dataclass(frozen=True)
class LevelParameters:
    level_number: int
    width: int
    height: int
    nutrients: int
    explosion_buffs: int
    portal_pairs: int
    leniency: int


def _clamp(v: int, lo: int, hi: int) -> int:
    return lo if v < lo else hi if v > hi else v


def level_parameters(
    level_number: int,
    config: Optional[GenerationConfig] = None,
    rng: Optional[random.Random] = None,
) -> LevelParameters:
    """
    Generation inputs for a level of the endless run.

    Args:
        level_number: 1-based level index
        config: Progression tuning
        rng: Random source for the +0/+1 size jitter

    Returns:
        LevelParameters for `LevelGenerator.generate_level`
    """
    if level_number < 1:
        raise ValueError("level_number must be positive")
    config = config or GenerationConfig()
    rng = rng or random.Random()
    n = level_number

    nutrients = min(config.base_nutrients + (n - 1) // defaults.NUTRIENT_STEP_LEVELS, config.max_nutrients)
    explosions = 1 if n >= defaults.EXPLOSION_MIN_LEVEL and n % 2 == 0 else 0
    explosions = min(explosions, config.max_explosion_buffs)
    portals = 1 if n >= defaults.PORTAL_MIN_LEVEL and n % 3 == 0 else 0
    leniency = max(config.min_leniency, config.base_leniency - (n - 1) // defaults.LENIENCY_STEP_LEVELS)

    # Bigger minimum when the grid has to fit more than one element (portals take two cells)
    element_count = nutrients + explosions + 2 * portals
    min_size = config.min_grid_size_crowded if element_count > 1 else config.min_grid_size

    min_width = max(config.base_width + (n - 1) // 2, min_size)
    min_height = max(config.base_height + (n - 1) // 2, min_size)
    width = _clamp(rng.randint(min_width, min_width + 1), min_size, config.max_grid_size)
    height = _clamp(rng.randint(min_height, min_height + 1), min_size, config.max_grid_size)

    return LevelParameters(
        level_number=n,
        width=width,
        height=height,
        nutrients=nutrients,
        explosion_buffs=explosions,
        portal_pairs=portals,
        leniency=leniency,
    )


def generate_progression(
    count: int,
    config: Optional[GenerationConfig] = None,
    seed: Optional[int] = None,
    start_level: int = 1,
) -> LevelSet:
    """
    Generate `count` consecutive endless-mode levels.

    Raises:
        LevelGenerationError: if any level exhausts its retry budget
    """
    if count <= 0:
        raise ValueError("count must be > 0")
    config = config or GenerationConfig()
    rng = random.Random(seed)
    generator = LevelGenerator(config=config, rng=rng)

    level_set = LevelSet(seed=seed)
    for level_number in range(start_level, start_level + count):
        params = level_parameters(level_number, config, rng)
        logger.info(
            "Starting Level %d: Leniency=%d, Width=%d, Height=%d, Nutrients=%d, Explosions=%d, Portals=%d",
            level_number, params.leniency, params.width, params.height,
            params.nutrients, params.explosion_buffs, params.portal_pairs,
        )
        level = generator.generate_level_with_retries(
            params.width, params.height, params.nutrients,
            params.explosion_buffs, params.portal_pairs, params.leniency,
        )
        if level is None:
            raise LevelGenerationError(
                f"Could not generate a valid level {level_number} after "
                f"{config.max_generation_attempts} attempts"
            )
        level_set.levels.append(level)
    return level_set
