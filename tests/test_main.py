import main
from divide.level.level_data import LevelDescriptor, LevelSet
from divide.level.progression import LevelGenerationError


def test_parse_args_defaults():
    args = main.parse_args(["3"])
    assert args.count == 3
    assert args.start_level == 1
    assert args.seed is None
    assert not args.verbose

def test_main_writes_level_set(tmp_path, monkeypatch):
    level = LevelDescriptor(width=3, height=3, spawn=(0, 0), nutrients=((2, 0),), capacity=3, leniency=1)
    seen = {}

    def fake_progression(count, config=None, seed=None, start_level=1):
        seen.update(count=count, seed=seed, start_level=start_level)
        return LevelSet(levels=[level] * count, seed=seed)

    monkeypatch.setattr(main, "generate_progression", fake_progression)
    out = tmp_path / "levels.json"

    code = main.main(["2", "--seed", "4", "--start-level", "3",
                      "--config", str(tmp_path / "missing.json"), "--output", str(out)])

    assert code == 0
    assert seen == {"count": 2, "seed": 4, "start_level": 3}
    assert LevelSet.load_from_json(str(out)).levels == [level, level]

def test_main_reports_generation_failure(tmp_path, monkeypatch):
    def failing(*args, **kwargs):
        raise LevelGenerationError("no level")

    monkeypatch.setattr(main, "generate_progression", failing)
    out = tmp_path / "levels.json"
    assert main.main(["1", "--output", str(out), "--config", str(tmp_path / "x.json")]) == 1
    assert not out.exists()
