"""Configuration loader for the puzzle generator."""

from dataclasses import asdict, dataclass, fields
import json
import logging
import os

import config as defaults

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for procedural puzzle generation."""
    # Maze texture
    extra_wall_chance: float = defaults.EXTRA_WALL_CHANCE

    # Placement shortlists (uniform choice among the top-K candidates)
    nutrient_shortlist_size: int = defaults.NUTRIENT_SHORTLIST_SIZE
    buff_shortlist_size: int = defaults.BUFF_SHORTLIST_SIZE

    # Retry policy: fresh randomness per attempt, then give up
    max_generation_attempts: int = defaults.MAX_GENERATION_ATTEMPTS

    # --- Endless-mode progression ---
    base_width: int = defaults.BASE_WIDTH
    base_height: int = defaults.BASE_HEIGHT
    base_nutrients: int = defaults.BASE_NUTRIENTS
    base_leniency: int = defaults.BASE_LENIENCY
    min_leniency: int = defaults.MIN_LENIENCY
    # Nutrient count capped to keep the route table small. Raise only with a faster solver.
    max_nutrients: int = defaults.MAX_NUTRIENTS
    max_explosion_buffs: int = defaults.MAX_EXPLOSION_BUFFS
    min_grid_size: int = defaults.MIN_GRID_SIZE
    min_grid_size_crowded: int = defaults.MIN_GRID_SIZE_CROWDED
    max_grid_size: int = defaults.MAX_GRID_SIZE


def _allowed_keys():
    return {f.name for f in fields(GenerationConfig)}


def load_generation_config(config_path: str = defaults.PCG_CONFIG_PATH) -> GenerationConfig:
    """
    Load generation configuration from JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        GenerationConfig: Loaded configuration, or defaults when the file is
        missing or unreadable
    """
    if not os.path.exists(config_path):
        logger.warning("Config file not found: %s, using defaults", config_path)
        return GenerationConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Error loading config: %s, using defaults", e)
        return GenerationConfig()

    config_data = data.get('pcg_config', {}) if isinstance(data, dict) else {}
    # Filter only fields that GenerationConfig accepts
    allowed = _allowed_keys()
    filtered = {k: v for k, v in config_data.items() if k in allowed}
    ignored = sorted(set(config_data) - allowed)
    if ignored:
        logger.debug("Ignoring unknown config keys: %s", ", ".join(ignored))
    try:
        return GenerationConfig(**filtered)
    except TypeError as e:
        logger.warning("Error loading config: %s, using defaults", e)
        return GenerationConfig()


def save_generation_config(config: GenerationConfig, config_path: str = defaults.PCG_CONFIG_PATH) -> None:
    """
    Save generation configuration to JSON file.

    Keys in the existing file that GenerationConfig does not know are kept.
    """
    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    existing = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                existing = json.load(f) or {}
        except (OSError, json.JSONDecodeError):
            existing = {}

    pcg_cfg = existing.get("pcg_config", {})
    pcg_cfg.update(asdict(config))
    existing["pcg_config"] = pcg_cfg

    with open(config_path, 'w') as f:
        json.dump(existing, f, indent=2)
