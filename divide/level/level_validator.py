"""
Level Validator - structural checks on a tentative level
Rejects spawn or features that are out of bounds, on a wall, or on spawn
"""

import logging
from typing import List, Optional

from divide.core.utils import Coord
from divide.level.level_data import LevelLayout
from divide.level.wall_grid import WallGrid

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of level validation with the list of violated invariants"""

    def __init__(self, is_valid: bool, message: str, issues: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.message = message
        self.issues = issues if issues is not None else []

    def __bool__(self) -> bool:
        return self.is_valid

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, message={self.message!r}, issues={self.issues})"


def _check_feature(label: str, pos: Coord, layout: LevelLayout, grid: WallGrid, issues: List[str]) -> None:
    x, y = pos
    if not grid.is_in_bounds(x, y):
        issues.append(f"Invalid {label} coordinates: ({x}, {y})")
    elif grid.is_wall(x, y):
        issues.append(f"{label.capitalize()} at ({x}, {y}) is on a wall.")
    if pos == layout.spawn:
        issues.append(f"{label.capitalize()} placed on spawn point.")


def validate_level(layout: LevelLayout, grid: Optional[WallGrid] = None) -> ValidationResult:
    """
    Validate a tentative level against its wall grid.

    Pure: neither the layout nor the grid is modified.

    Args:
        layout: Level to check (a LevelDescriptor works too)
        grid: Working wall grid; rebuilt from layout.walls when omitted

    Returns:
        ValidationResult, truthy when every check passed
    """
    if grid is None:
        grid = WallGrid.from_walls(layout.width, layout.height, layout.walls)

    issues: List[str] = []

    sx, sy = layout.spawn
    if not grid.is_in_bounds(sx, sy):
        issues.append("Invalid spawn point coordinates.")
    elif grid.is_wall(sx, sy):
        issues.append("Spawn point is on a wall.")

    for nutrient in layout.nutrients:
        _check_feature("nutrient", nutrient, layout, grid, issues)

    for explosion in sorted(layout.explosion_buffs):
        _check_feature("explosion", explosion, layout, grid, issues)

    for pair in layout.portal_pairs:
        for endpoint in pair.endpoints():
            _check_feature("portal", endpoint, layout, grid, issues)

    if issues:
        for issue in issues:
            logger.error(issue)
        return ValidationResult(False, "Level validation failed", issues)
    return ValidationResult(True, "Level is structurally valid")
