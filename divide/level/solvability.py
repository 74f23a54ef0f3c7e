"""Solvability engine: proves a level completable and prices it in moves.

Two questions are answered here:
- can every nutrient be reached from spawn under the traversal rules?
- what is the minimum number of spawn moves that collects all of them?

Traversal rules (one move per transition):
- step to an orthogonal neighbour that is open
- step into an adjacent wall from an explosion-buff cell whose buff has not
  been used on this search path; the buff cell joins the consumed set
- stepping next to a portal endpoint may land on its partner instead,
  leaving the consumed set untouched

Search state is (cell, consumed set). The same cell reached with a different
consumed set is a different state.

Route pricing runs a Held-Karp table over subsets of nutrients, starting
at spawn and ending anywhere.
"""

from collections import deque
from dataclasses import dataclass, field
import logging
from typing import Deque, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from divide.core.utils import Coord, orthogonal_neighbors
from divide.level.level_data import LevelLayout

logger = logging.getLogger(__name__)

UNREACHABLE = None
_INF = float("inf")

TraversalState = Tuple[Coord, FrozenSet[Coord]]


@dataclass(frozen=True)
class TraversalRules:
    """Lookup tables the shortest-path search needs, built once per level."""
    width: int
    height: int
    walls: FrozenSet[Coord]
    explosions: FrozenSet[Coord]
    portals: Dict[Coord, Coord] = field(default_factory=dict, hash=False)

    @classmethod
    def from_layout(cls, layout: LevelLayout) -> "TraversalRules":
        portals: Dict[Coord, Coord] = {}
        for pair in layout.portal_pairs:
            portals[pair.enter] = pair.exit
            portals[pair.exit] = pair.enter
        return cls(
            width=layout.width,
            height=layout.height,
            walls=frozenset(layout.walls),
            explosions=frozenset(layout.explosion_buffs),
            portals=portals,
        )


@dataclass
class SolvabilityReport:
    """
    Outcome of analysing one level.

    Attributes:
        solvable: True when every nutrient is reachable from spawn
        optimal_moves: Minimum moves to collect all nutrients, None if unsolvable
        points: Points of interest, spawn first
        cost_matrix: Pairwise move counts between points, None if unsolvable
        unreachable_pair: First pair found to be disconnected
    """
    solvable: bool
    optimal_moves: Optional[int]
    points: List[Coord]
    cost_matrix: Optional[List[List[int]]] = None
    unreachable_pair: Optional[Tuple[Coord, Coord]] = None


def calculate_shortest_path(start: Coord, end: Coord, rules: TraversalRules) -> Optional[int]:
    """
    Breadth-first search over (cell, consumed-explosions) states.

    All moves cost one, so the first time `end` is dequeued its distance is
    optimal. Each call owns its queue and visited set.

    Returns:
        Move count, or None when `end` cannot be reached
    """
    if start == end:
        return 0

    no_explosions: FrozenSet[Coord] = frozenset()
    queue: Deque[Tuple[Coord, int, FrozenSet[Coord]]] = deque([(start, 0, no_explosions)])
    visited: Set[TraversalState] = {(start, no_explosions)}

    while queue:
        pos, dist, used = queue.popleft()
        if pos == end:
            return dist

        can_break = pos in rules.explosions and pos not in used
        for neighbor in orthogonal_neighbors(pos, rules.width, rules.height):
            is_wall = neighbor in rules.walls
            if is_wall and not can_break:
                continue
            next_used = used | {pos} if is_wall else used

            state = (neighbor, next_used)
            if state not in visited:
                visited.add(state)
                queue.append((neighbor, dist + 1, next_used))

            partner = rules.portals.get(neighbor)
            if partner is not None:
                state = (partner, next_used)
                if state not in visited:
                    visited.add(state)
                    queue.append((partner, dist + 1, next_used))

    return UNREACHABLE


def points_of_interest(layout: LevelLayout) -> List[Coord]:
    """Spawn followed by each distinct nutrient, in placement order."""
    points = [layout.spawn]
    for nutrient in layout.nutrients:
        if nutrient not in points:
            points.append(nutrient)
    return points


def _pairwise_costs(
    points: Sequence[Coord], rules: TraversalRules
) -> Tuple[Optional[List[List[int]]], Optional[Tuple[Coord, Coord]]]:
    n = len(points)
    matrix = [[0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            cost = calculate_shortest_path(points[i], points[j], rules)
            if cost is None:
                logger.debug("No path between %s and %s", points[i], points[j])
                return None, (points[i], points[j])
            matrix[i][j] = matrix[j][i] = cost
    return matrix, None


def build_cost_matrix(points: Sequence[Coord], rules: TraversalRules) -> Optional[List[List[int]]]:
    """
    Symmetric matrix of shortest move counts, one search per unordered pair.

    Returns None as soon as any pair is disconnected.
    """
    matrix, _ = _pairwise_costs(points, rules)
    return matrix


def _greedy_route_cost(cost_matrix: Sequence[Sequence[int]]) -> int:
    # nearest-neighbour tour from index 0, an upper bound for pruning
    n = len(cost_matrix)
    remaining = set(range(1, n))
    current, total = 0, 0
    while remaining:
        nxt = min(remaining, key=lambda j: (cost_matrix[current][j], j))
        total += cost_matrix[current][nxt]
        remaining.remove(nxt)
        current = nxt
    return total


def find_min_moves(cost_matrix: Sequence[Sequence[int]]) -> int:
    """
    Cheapest route from point 0 visiting every other point at least once.

    Held-Karp dynamic programming: ``table[mask][i]`` is the cheapest way to
    stand on point i having visited the nutrients in `mask` (bit j-1 stands
    for point j). Masks are filled in increasing order, so every subset is
    final before it is extended. Partial sums above the best known total
    (seeded with a nearest-neighbour tour) are dropped.

    Args:
        cost_matrix: Square matrix of non-negative pairwise costs, spawn at 0

    Returns:
        Minimum total cost; 0 when there is nothing to visit
    """
    n = len(cost_matrix)
    if any(len(row) != n for row in cost_matrix):
        raise ValueError("cost_matrix must be square")
    if n <= 1:
        return 0

    nutrient_count = n - 1
    full_mask = (1 << nutrient_count) - 1
    best = _greedy_route_cost(cost_matrix)

    table: List[List[float]] = [[_INF] * n for _ in range(1 << nutrient_count)]
    table[0][0] = 0

    for mask in range(1 << nutrient_count):
        for i in range(n):
            cost = table[mask][i]
            if cost > best:
                continue
            for j in range(1, n):
                bit = 1 << (j - 1)
                if mask & bit:
                    continue
                new_cost = cost + cost_matrix[i][j]
                if new_cost > best:
                    continue
                next_mask = mask | bit
                if new_cost < table[next_mask][j]:
                    table[next_mask][j] = new_cost
                    if next_mask == full_mask and new_cost < best:
                        best = new_cost

    return int(min(table[full_mask][1:]))


def analyze_level(layout: LevelLayout) -> SolvabilityReport:
    """Run the full solvability check and return everything it learned."""
    points = points_of_interest(layout)
    if len(points) <= 1:
        return SolvabilityReport(solvable=True, optimal_moves=0, points=points, cost_matrix=[[0]])

    rules = TraversalRules.from_layout(layout)
    matrix, unreachable = _pairwise_costs(points, rules)
    if matrix is None:
        return SolvabilityReport(
            solvable=False, optimal_moves=None, points=points, unreachable_pair=unreachable
        )
    return SolvabilityReport(
        solvable=True,
        optimal_moves=find_min_moves(matrix),
        points=points,
        cost_matrix=matrix,
    )


def calculate_optimal_path_cost(layout: LevelLayout) -> Optional[int]:
    """Minimum moves to collect every nutrient, 0 without nutrients, None if unsolvable."""
    return analyze_level(layout).optimal_moves
