"""Outbound event serialization and the EventLog listener."""
import json

from doudizhu.deck import parse_cards
from doudizhu.events import CardsPlayed, EventLog, MatchFinished, PhaseChanged, PlayerPassed
from doudizhu.patterns import classify
from doudizhu.scoring import settle
from doudizhu.state import Phase, PlayRecord, Role


def test_to_dict_is_json_ready():
    played = parse_cards(["♠3", "♥3"])
    event = CardsPlayed("p0", tuple(played), classify(played), 15)
    data = event.to_dict()
    assert data["event"] == "cards_played"
    assert data["cards"] == ["♠3", "♥3"]
    assert data["pattern"]["type"] == "pair"
    json.dumps(data)

    record = PlayRecord("p0", tuple(played), classify(played), 0)
    settlement = settle([record], "p0", Role.LANDLORD, ["p0", "p1", "p2"])
    finished = MatchFinished("p0", Role.LANDLORD, settlement).to_dict()
    assert finished["winner_role"] == "landlord"
    assert finished["settlement"]["deltas"]["p0"] == settlement.deltas["p0"]
    json.dumps(finished)


def test_event_log():
    log = EventLog()
    log(PhaseChanged(Phase.BIDDING))
    log(PlayerPassed("p1"))
    log(PlayerPassed("p2", automatic=True))
    assert log.names() == ["phase_changed", "player_passed", "player_passed"]
    assert len(log.of_type(PlayerPassed)) == 2
    assert log.last(PlayerPassed).automatic
    assert log.last(CardsPlayed) is None
    log.clear()
    assert log.events == []
