# === Global configuration & tuning ===

# === Grid bounds ===
# The solver's state space grows with area * 2^buffs, keep grids small.
MIN_GRID_SIZE = 3
MIN_GRID_SIZE_CROWDED = 4  # used when a level carries more than one element
MAX_GRID_SIZE = 7

# === Maze carving ===
EXTRA_WALL_CHANCE = 0.1  # Fraction of open cells turned back into walls for texture

# === Feature placement ===
NUTRIENT_SHORTLIST_SIZE = 10   # Top-K hard-to-reach nutrient candidates
BUFF_SHORTLIST_SIZE = 5        # Top-K strategic explosion-buff candidates
DISTANT_SHORTLIST_SIZE = 5     # Top-K far-away portal candidates
MIN_NUTRIENT_SPACING = 2       # Manhattan spacing between nutrients
NUTRIENT_SPAWN_DISTANCE_LARGE = 3  # min distance from spawn when a side is >= 5
NUTRIENT_SPAWN_DISTANCE_SMALL = 2
LARGE_GRID_THRESHOLD = 5

# === Solver caps ===
# Route optimizer is exponential in nutrient count (bitmask over subsets).
MAX_NUTRIENTS = 3
MAX_EXPLOSION_BUFFS = 1

# === Generation retries ===
MAX_GENERATION_ATTEMPTS = 5

# === Level progression (endless mode) ===
BASE_WIDTH = 3
BASE_HEIGHT = 3
BASE_NUTRIENTS = 1
BASE_LENIENCY = 2       # free extra spawns on level 1
MIN_LENIENCY = 1
NUTRIENT_STEP_LEVELS = 5     # one more nutrient every N levels
LENIENCY_STEP_LEVELS = 3     # one less free spawn every N levels
EXPLOSION_MIN_LEVEL = 2      # buffs on even levels from here
PORTAL_MIN_LEVEL = 4         # portals on levels divisible by 3 from here

# === Paths ===
PCG_CONFIG_PATH = "config/pcg_config.json"
LEVEL_SET_PATH = "data/levels/generated_levels.json"
