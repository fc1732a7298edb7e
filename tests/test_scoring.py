"""Settlement: multipliers, spring / anti-spring and zero-sum deltas."""
import pytest

from doudizhu.patterns import Pattern, PatternType
from doudizhu.scoring import match_multiplier, settle
from doudizhu.state import PlayRecord, Role

IDS = ["L", "F1", "F2"]
SINGLE = Pattern(PatternType.SINGLE, 3, 1)
BOMB = Pattern(PatternType.BOMB, 9, 4)
ROCKET = Pattern(PatternType.ROCKET, 17, 2)


def history(*entries):
    return [PlayRecord(pid, (), pattern, i) for i, (pid, pattern) in enumerate(entries)]


def test_plain_landlord_win():
    s = settle(history(("L", SINGLE), ("F1", SINGLE), ("L", SINGLE)), "L", Role.LANDLORD, IDS, base_score=1)
    assert s.multiplier == 2
    assert s.deltas == {"L": 2, "F1": -1, "F2": -1}
    assert not s.spring and not s.anti_spring


def test_farmer_win_with_bomb_and_rocket():
    h = history(("L", SINGLE), ("F1", BOMB), ("L", SINGLE), ("F2", ROCKET), ("F2", SINGLE))
    s = settle(h, "L", Role.FARMER, IDS, base_score=3)
    assert s.bomb_count == 1 and s.rocket_count == 1
    assert s.multiplier == 2 * 3 * 8
    assert s.deltas["L"] == -3 * 48
    assert s.deltas["F1"] == s.deltas["F2"] == 3 * 24
    assert s.total_score == 144


def test_spring():
    s = settle(history(("L", SINGLE), ("L", SINGLE)), "L", Role.LANDLORD, IDS)
    assert s.spring
    assert s.multiplier == 2 * 16


def test_anti_spring():
    s = settle(history(("L", SINGLE), ("F1", SINGLE), ("F1", SINGLE)), "L", Role.FARMER, IDS)
    assert s.anti_spring and not s.spring
    assert s.multiplier == 32
    assert s.deltas["L"] == -32


@pytest.mark.parametrize("bombs,rockets,spring", [(0, 0, False), (2, 0, True), (1, 1, False), (3, 1, True)])
def test_zero_sum(bombs, rockets, spring):
    entries = [("F1", BOMB)] * bombs + [("F2", ROCKET)] * rockets + [("L", SINGLE)]
    for role in (Role.LANDLORD, Role.FARMER):
        s = settle(history(*entries), "L", role, IDS, base_score=5)
        assert sum(s.deltas.values()) == 0
        assert abs(s.deltas["L"]) == s.total_score
    assert match_multiplier(bombs, rockets, spring) % 2 == 0


def test_settle_rejects_bad_inputs():
    with pytest.raises(ValueError):
        settle([], "nobody", Role.LANDLORD, IDS)
    with pytest.raises(ValueError):
        settle([], "L", Role.UNASSIGNED, IDS)
