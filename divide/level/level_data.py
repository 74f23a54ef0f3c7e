"""Level descriptor records

The LevelDescriptor is the only artifact the generator hands to gameplay.
It is immutable; runtime mutation (broken walls, collected nutrients)
happens on a RuntimeGrid built from it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
import json
import os

from divide.core.utils import Coord


def _coord(value: Any) -> Coord:
    x, y = value
    return (int(x), int(y))


@dataclass(frozen=True, eq=False)
class PortalPair:
    """Two linked portal endpoints. Order does not matter for equality."""
    enter: Coord
    exit: Coord

    def endpoints(self) -> Tuple[Coord, Coord]:
        return (self.enter, self.exit)

    def as_set(self) -> FrozenSet[Coord]:
        return frozenset(self.endpoints())

    def partner_of(self, pos: Coord) -> Optional[Coord]:
        if pos == self.enter:
            return self.exit
        if pos == self.exit:
            return self.enter
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PortalPair):
            return NotImplemented
        return self.as_set() == other.as_set()

    def __hash__(self) -> int:
        return hash(self.as_set())

    def to_dict(self) -> Dict[str, Any]:
        return {"enter": list(self.enter), "exit": list(self.exit)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PortalPair":
        return cls(enter=_coord(data["enter"]), exit=_coord(data["exit"]))


@dataclass(frozen=True)
class LevelLayout:
    """
    Static layout of a level, without its move budget.

    Attributes:
        width: Grid width in cells
        height: Grid height in cells
        spawn: Entry cell, always open
        walls: Impassable cells
        nutrients: Collectibles in placement order, unique
        explosion_buffs: One-time wall breakers
        portal_pairs: Linked teleport endpoints
    """
    width: int
    height: int
    spawn: Coord
    walls: FrozenSet[Coord] = frozenset()
    nutrients: Tuple[Coord, ...] = ()
    explosion_buffs: FrozenSet[Coord] = frozenset()
    portal_pairs: Tuple[PortalPair, ...] = ()

    def portal_endpoints(self) -> List[Coord]:
        return [p for pair in self.portal_pairs for p in pair.endpoints()]

    def is_walkable(self, pos: Coord) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height and pos not in self.walls


@dataclass(frozen=True)
class LevelDescriptor(LevelLayout):
    """
    A validated, solvable level.

    `capacity` is the number of spawn moves the player gets:
    the provably optimal move count plus `leniency`.
    """
    capacity: int = 0
    leniency: int = 0

    @property
    def optimal_moves(self) -> int:
        return self.capacity - self.leniency

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "spawn": list(self.spawn),
            "capacity": self.capacity,
            "leniency": self.leniency,
            "walls": [list(w) for w in sorted(self.walls)],
            "nutrients": [list(n) for n in self.nutrients],
            "explosion_buffs": [list(e) for e in sorted(self.explosion_buffs)],
            "portal_pairs": [p.to_dict() for p in self.portal_pairs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelDescriptor":
        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            spawn=_coord(data["spawn"]),
            walls=frozenset(_coord(w) for w in data.get("walls", [])),
            nutrients=tuple(_coord(n) for n in data.get("nutrients", [])),
            explosion_buffs=frozenset(_coord(e) for e in data.get("explosion_buffs", [])),
            portal_pairs=tuple(PortalPair.from_dict(p) for p in data.get("portal_pairs", [])),
            capacity=int(data.get("capacity", 0)),
            leniency=int(data.get("leniency", 0)),
        )


@dataclass
class LevelSet:
    """Ordered run of generated levels plus the seed that produced them."""
    levels: List[LevelDescriptor] = field(default_factory=list)
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        out["seed"] = int(self.seed) if self.seed is not None else None
        out["generated_at"] = datetime.now(timezone.utc).isoformat()
        out["levels"] = [
            dict(level_number=i, **level.to_dict())
            for i, level in enumerate(self.levels, start=1)
        ]
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelSet":
        levels = [LevelDescriptor.from_dict(entry) for entry in data.get("levels", [])]
        seed = data.get("seed")
        try:
            seed = int(seed) if seed is not None else None
        except (TypeError, ValueError):
            seed = None
        return cls(levels=levels, seed=seed)

    def save_to_json(self, filepath: str) -> None:
        """Save level set to JSON file (includes seed)."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_from_json(cls, filepath: str) -> "LevelSet":
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def get_level(self, level_number: int) -> Optional[LevelDescriptor]:
        """1-based lookup."""
        if 1 <= level_number <= len(self.levels):
            return self.levels[level_number - 1]
        return None
