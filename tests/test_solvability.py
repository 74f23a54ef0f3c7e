import pytest

from divide.level.level_data import LevelLayout, PortalPair
from divide.level.solvability import (
    TraversalRules,
    analyze_level,
    build_cost_matrix,
    calculate_optimal_path_cost,
    calculate_shortest_path,
    find_min_moves,
    points_of_interest,
)

# --- Fixtures for common test data ---

@pytest.fixture
def corridor_layout():
    # 4x1 corridor: spawn, buff, wall, nutrient
    return LevelLayout(
        width=4,
        height=1,
        spawn=(0, 0),
        walls=frozenset({(2, 0)}),
        nutrients=((3, 0),),
        explosion_buffs=frozenset({(1, 0)}),
    )

@pytest.fixture
def barrier_layout():
    # 5x3 room split by a wall column at x=2, open only along the bottom row
    # . . # . N
    # . . # . .
    # . . . . .
    return LevelLayout(
        width=5,
        height=3,
        spawn=(0, 0),
        walls=frozenset({(2, 0), (2, 1)}),
        nutrients=((4, 0),),
    )

@pytest.fixture
def portal_layout(barrier_layout):
    # Same room with a portal straddling the wall column
    return LevelLayout(
        width=barrier_layout.width,
        height=barrier_layout.height,
        spawn=barrier_layout.spawn,
        walls=barrier_layout.walls,
        nutrients=barrier_layout.nutrients + ((4, 2),),
        portal_pairs=(PortalPair(enter=(1, 0), exit=(3, 0)),),
    )


# --- Shortest path ---

def test_shortest_path_same_cell_is_zero(barrier_layout):
    rules = TraversalRules.from_layout(barrier_layout)
    assert calculate_shortest_path((1, 1), (1, 1), rules) == 0

def test_shortest_path_detours_around_walls(barrier_layout):
    rules = TraversalRules.from_layout(barrier_layout)
    # down 2, across 4, up 2
    assert calculate_shortest_path((0, 0), (4, 0), rules) == 8

def test_shortest_path_unreachable_returns_none():
    layout = LevelLayout(
        width=5, height=5, spawn=(0, 0),
        walls=frozenset({(2, 1), (1, 2), (3, 2), (2, 3)}),
        nutrients=((2, 2),),
    )
    rules = TraversalRules.from_layout(layout)
    assert calculate_shortest_path((0, 0), (2, 2), rules) is None

def test_explosion_buff_breaks_one_adjacent_wall(corridor_layout):
    rules = TraversalRules.from_layout(corridor_layout)
    # onto the buff, through the wall, onto the nutrient
    assert calculate_shortest_path((0, 0), (3, 0), rules) == 3

def test_wall_is_impassable_without_buff(corridor_layout):
    layout = LevelLayout(
        width=corridor_layout.width,
        height=corridor_layout.height,
        spawn=corridor_layout.spawn,
        walls=corridor_layout.walls,
        nutrients=corridor_layout.nutrients,
    )
    rules = TraversalRules.from_layout(layout)
    assert calculate_shortest_path((0, 0), (3, 0), rules) is None

def test_explosion_buff_is_used_only_once():
    # Two walls in a row need two explosions; one buff is not enough
    layout = LevelLayout(
        width=5, height=1, spawn=(0, 0),
        walls=frozenset({(2, 0), (3, 0)}),
        nutrients=((4, 0),),
        explosion_buffs=frozenset({(1, 0)}),
    )
    rules = TraversalRules.from_layout(layout)
    assert calculate_shortest_path((0, 0), (4, 0), rules) is None

def test_explosion_must_be_triggered_from_buff_cell():
    # Buff is not next to the wall, so it can't open it
    layout = LevelLayout(
        width=4, height=1, spawn=(0, 0),
        walls=frozenset({(2, 0)}),
        nutrients=((3, 0),),
        explosion_buffs=frozenset({(0, 0)}),
    )
    rules = TraversalRules.from_layout(layout)
    assert calculate_shortest_path((0, 0), (3, 0), rules) is None

def test_each_buff_opens_its_own_wall():
    # . B # B # N  with two buffs, each facing one wall
    layout = LevelLayout(
        width=6, height=1, spawn=(0, 0),
        walls=frozenset({(2, 0), (4, 0)}),
        nutrients=((5, 0),),
        explosion_buffs=frozenset({(1, 0), (3, 0)}),
    )
    rules = TraversalRules.from_layout(layout)
    assert calculate_shortest_path((0, 0), (5, 0), rules) == 5

def test_portal_shortcut_beats_walking(barrier_layout, portal_layout):
    walk = calculate_shortest_path((0, 0), (4, 0), TraversalRules.from_layout(barrier_layout))
    hop = calculate_shortest_path((0, 0), (4, 0), TraversalRules.from_layout(portal_layout))
    # step onto (1,0) lands on (3,0), then one more step
    assert hop == 2
    assert hop < walk

def test_portal_works_in_both_directions(portal_layout):
    rules = TraversalRules.from_layout(portal_layout)
    assert calculate_shortest_path((4, 0), (0, 0), rules) == 2

def test_shortest_path_is_symmetric(portal_layout):
    rules = TraversalRules.from_layout(portal_layout)
    # Features never sit on a portal endpoint, so endpoints are left out
    blocked = portal_layout.walls | set(portal_layout.portal_endpoints())
    cells = [(x, y) for x in range(5) for y in range(3) if (x, y) not in blocked]
    for a in cells:
        for b in cells:
            assert calculate_shortest_path(a, b, rules) == calculate_shortest_path(b, a, rules)


# --- Cost matrix and route pricing ---

def test_points_of_interest_spawn_first_and_deduplicated():
    layout = LevelLayout(width=3, height=3, spawn=(0, 0), nutrients=((2, 2), (2, 0), (2, 2)))
    assert points_of_interest(layout) == [(0, 0), (2, 2), (2, 0)]

def test_cost_matrix_is_symmetric_with_zero_diagonal(portal_layout):
    rules = TraversalRules.from_layout(portal_layout)
    points = points_of_interest(portal_layout)
    matrix = build_cost_matrix(points, rules)

    assert matrix is not None
    for i in range(len(points)):
        assert matrix[i][i] == 0
        for j in range(len(points)):
            assert matrix[i][j] == matrix[j][i]

def test_cost_matrix_none_when_a_pair_is_disconnected():
    layout = LevelLayout(
        width=3, height=1, spawn=(0, 0),
        walls=frozenset({(1, 0)}),
        nutrients=((2, 0),),
    )
    rules = TraversalRules.from_layout(layout)
    assert build_cost_matrix(points_of_interest(layout), rules) is None

def test_find_min_moves_two_nutrients():
    # spawn->A=2, spawn->B=4, A<->B=3: best is spawn->A->B
    matrix = [
        [0, 2, 4],
        [2, 0, 3],
        [4, 3, 0],
    ]
    assert find_min_moves(matrix) == 5

def test_find_min_moves_picks_the_better_order():
    # Greedy takes the nearest nutrient first and pays for it later
    matrix = [
        [0, 1, 2, 2],
        [1, 0, 3, 3],
        [2, 3, 0, 10],
        [2, 3, 10, 0],
    ]
    # spawn->1->2 = 4, then 2->3 = 10 ... vs spawn->2->1->3 = 2+3+3 = 8
    assert find_min_moves(matrix) == 8

def test_find_min_moves_nothing_to_visit():
    assert find_min_moves([[0]]) == 0
    assert find_min_moves([]) == 0

def test_find_min_moves_rejects_non_square():
    with pytest.raises(ValueError):
        find_min_moves([[0, 1], [1]])


# --- Whole-level analysis ---

def test_optimal_cost_no_nutrients_is_zero():
    layout = LevelLayout(width=3, height=3, spawn=(1, 1))
    assert calculate_optimal_path_cost(layout) == 0

def test_optimal_cost_single_nutrient_open_grid():
    layout = LevelLayout(width=3, height=3, spawn=(0, 0), nutrients=((2, 0),))
    assert calculate_optimal_path_cost(layout) == 2

def test_optimal_cost_sealed_nutrient_is_none():
    layout = LevelLayout(
        width=5, height=5, spawn=(0, 0),
        walls=frozenset({(2, 1), (1, 2), (3, 2), (2, 3)}),
        nutrients=((2, 2),),
    )
    report = analyze_level(layout)
    assert not report.solvable
    assert report.optimal_moves is None
    assert report.unreachable_pair == ((0, 0), (2, 2))

def test_analyze_level_uses_portal(portal_layout):
    report = analyze_level(portal_layout)
    assert report.solvable
    # spawn -> (4,0) through the portal, then down to (4,2)
    assert report.optimal_moves == 4
    assert report.points == [(0, 0), (4, 0), (4, 2)]
