import logging
import random

import pytest

from divide.level.config_loader import GenerationConfig
from divide.level.level_data import LevelLayout, PortalPair
from divide.level.level_generator import LevelGenerator, generate_level
from divide.level.level_validator import validate_level
from divide.level.solvability import calculate_optimal_path_cost

# --- Fixtures for common test data ---

@pytest.fixture
def generator():
    return LevelGenerator(rng=random.Random(2024))


def _assert_descriptor_invariants(level):
    assert level.is_walkable(level.spawn)
    features = list(level.nutrients) + list(level.explosion_buffs) + level.portal_endpoints()
    for pos in features:
        assert level.is_walkable(pos)
        assert pos != level.spawn
    # no two features share a cell
    assert len(features) == len(set(features))
    assert level.capacity >= level.optimal_moves >= 0
    assert validate_level(level)


# --- Hand-built scenarios ---

def test_open_three_by_three_prices_the_route(generator):
    layout = LevelLayout(width=3, height=3, spawn=(0, 0), nutrients=((2, 0),))
    level = generator.finalize_level(layout, leniency=1)
    assert level is not None
    assert level.optimal_moves == 2
    assert level.capacity == 3

def test_sealed_nutrient_never_emits_a_level(generator):
    layout = LevelLayout(
        width=5, height=5, spawn=(0, 0),
        walls=frozenset({(2, 1), (1, 2), (3, 2), (2, 3)}),
        nutrients=((2, 2),),
    )
    assert generator.finalize_level(layout, leniency=2) is None

def test_portal_bridges_barrier(generator):
    layout = LevelLayout(
        width=5, height=3, spawn=(0, 0),
        walls=frozenset({(2, 0), (2, 1)}),
        nutrients=((4, 0),),
        portal_pairs=(PortalPair(enter=(1, 0), exit=(3, 0)),),
    )
    level = generator.finalize_level(layout, leniency=0)
    assert level is not None
    # one step through the portal, one more to the nutrient; walking takes 8
    assert level.capacity == 2

def test_invalid_layout_is_rejected(generator):
    layout = LevelLayout(width=3, height=3, spawn=(0, 0), walls=frozenset({(2, 2)}), nutrients=((2, 2),))
    assert generator.finalize_level(layout, leniency=1) is None


# --- Generated levels ---

@pytest.mark.parametrize("params", [
    (3, 3, 1, 0, 0, 2),
    (4, 4, 2, 1, 0, 1),
    (5, 4, 2, 0, 1, 1),
    (6, 6, 3, 1, 1, 1),
])
def test_generated_levels_hold_invariants(params):
    width, height, nutrients, buffs, portals, leniency = params
    produced = 0
    for seed in range(15):
        gen = LevelGenerator(rng=random.Random(seed))
        level = gen.generate_level_with_retries(width, height, nutrients, buffs, portals, leniency)
        if level is None:
            continue
        produced += 1
        assert (level.width, level.height) == (width, height)
        assert level.leniency == leniency
        assert len(level.nutrients) <= nutrients
        assert len(level.explosion_buffs) <= buffs
        assert len(level.portal_pairs) <= portals
        _assert_descriptor_invariants(level)
        # the stored budget is exactly the recomputed optimum plus leniency
        assert calculate_optimal_path_cost(level) == level.capacity - leniency
    assert produced > 0

def test_same_seed_same_level():
    a = LevelGenerator(rng=random.Random(77)).generate_level_with_retries(5, 5, 2, 1, 1, 1)
    b = LevelGenerator(rng=random.Random(77)).generate_level_with_retries(5, 5, 2, 1, 1, 1)
    assert a == b

def test_requested_counts_clamped_to_pool():
    # 1x1 grid: spawn takes the only cell
    level = generate_level(1, 1, 5, 2, 3, 2, rng=random.Random(0))
    assert level is not None
    assert level.nutrients == ()
    assert level.explosion_buffs == frozenset()
    assert level.portal_pairs == ()
    assert level.capacity == 2

def test_negative_inputs_clamped_to_zero():
    level = generate_level(3, 3, -1, -1, -1, -4, rng=random.Random(0))
    assert level is not None
    assert level.nutrients == ()
    assert level.leniency == 0
    assert level.capacity == 0

@pytest.mark.parametrize("size", [(0, 3), (3, 0), (-2, -2)])
def test_non_positive_dimensions_raise(generator, size):
    with pytest.raises(ValueError):
        generator.generate_level(size[0], size[1], 1, 0, 0, 1)

def test_retries_give_up_after_budget(monkeypatch, caplog):
    gen = LevelGenerator(config=GenerationConfig(max_generation_attempts=3), rng=random.Random(0))
    calls = []

    def always_fail(*args):
        calls.append(args)
        return None

    monkeypatch.setattr(gen, "_create_puzzle_level", always_fail)
    with caplog.at_level(logging.WARNING, logger="divide.level.level_generator"):
        assert gen.generate_level_with_retries(4, 4, 1, 0, 0, 1) is None

    assert len(calls) == 3
    assert "FATAL" in caplog.text

def test_retries_stop_at_first_success(monkeypatch):
    gen = LevelGenerator(rng=random.Random(0))
    real = gen._create_puzzle_level
    results = iter([None, "real"])
    calls = []

    def flaky(*args):
        calls.append(args)
        return None if next(results) is None else real(*args)

    monkeypatch.setattr(gen, "_create_puzzle_level", flaky)
    level = gen.generate_level_with_retries(3, 3, 0, 0, 0, 1, max_attempts=5)
    assert level is not None
    assert len(calls) == 2
