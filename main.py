import argparse
import logging
import sys

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Per-attempt carve/placement chatter is only useful with --verbose
logging.getLogger('divide.level.maze_carver').setLevel(logging.WARNING)
logging.getLogger('divide.level.feature_placement').setLevel(logging.WARNING)

from config import LEVEL_SET_PATH, PCG_CONFIG_PATH
from divide.level.config_loader import load_generation_config
from divide.level.progression import LevelGenerationError, generate_progression


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Generate solvable Divide puzzle levels."
    )
    p.add_argument("count", type=int, help="How many levels to generate.")
    p.add_argument(
        "--start-level",
        type=int,
        default=1,
        help="Level number of the first generated level (default: 1)",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed for reproducible generation.",
    )
    p.add_argument(
        "--config",
        type=str,
        default=PCG_CONFIG_PATH,
        help=f"Generation config JSON (default: {PCG_CONFIG_PATH})",
    )
    p.add_argument(
        "--output",
        type=str,
        default=LEVEL_SET_PATH,
        help=f"Where to write the level set (default: {LEVEL_SET_PATH})",
    )
    p.add_argument("--verbose", action="store_true", help="Log every carve and placement step.")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.count <= 0:
        raise SystemExit("count must be > 0")
    if args.start_level <= 0:
        raise SystemExit("start-level must be > 0")
    if args.verbose:
        logging.getLogger('divide').setLevel(logging.DEBUG)
        logging.getLogger('divide.level.maze_carver').setLevel(logging.DEBUG)
        logging.getLogger('divide.level.feature_placement').setLevel(logging.DEBUG)

    config = load_generation_config(args.config)
    try:
        level_set = generate_progression(
            args.count, config=config, seed=args.seed, start_level=args.start_level
        )
    except LevelGenerationError as e:
        logger.error("FATAL: %s", e)
        return 1

    level_set.save_to_json(args.output)
    for offset, level in enumerate(level_set.levels):
        logger.info(
            "Level %d: %dx%d | nutrients=%d buffs=%d portals=%d | optimal=%d capacity=%d",
            args.start_level + offset, level.width, level.height, len(level.nutrients),
            len(level.explosion_buffs), len(level.portal_pairs), level.optimal_moves, level.capacity,
        )
    logger.info("Wrote %d levels to %s", len(level_set.levels), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
