import threading
import pytest

from referee.dispatcher import (
    ADD_POINT,
    MATCH_RESET,
    NOTHING_TO_UNDO,
    RESET_MATCH,
    UNDO_LAST_POINT,
    CommandDispatcher,
)
from referee.exceptions import InvalidConfigError, InvalidTeamError
from referee.models import DeuceMode, MatchConfig, MatchState, Rule66, TeamScore


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def play(dispatcher, sequence):
    """
    sequence = ["us", "them", ...]
    """
    return [dispatcher.add_point(team) for team in sequence]


# ---------------------------------------------------------
# addPoint
# ---------------------------------------------------------

def test_add_point_returns_score_message():
    dispatcher = CommandDispatcher()

    messages = play(dispatcher, ["us", "them"])

    assert messages == ["15 - 0", "15 - 15"]
    assert dispatcher.history_size == 2
    assert dispatcher.last_action == "Point Red"


def test_add_point_invalid_team_is_atomic():
    dispatcher = CommandDispatcher()
    play(dispatcher, ["us"])

    with pytest.raises(InvalidTeamError):
        dispatcher.add_point("blue")

    assert dispatcher.history_size == 1
    assert dispatcher.state.points == TeamScore(us=1, them=0)


def test_points_after_match_finished_are_not_recorded():
    dispatcher = CommandDispatcher(MatchConfig(sets_to_win=1))
    play(dispatcher, ["us"] * 24)

    size = dispatcher.history_size
    message = dispatcher.add_point("them")

    assert message == "Match Blue!"
    assert dispatcher.history_size == size


# ---------------------------------------------------------
# undo
# ---------------------------------------------------------

def test_undo_restores_exact_previous_states():
    dispatcher = CommandDispatcher(MatchConfig(deuce_mode=DeuceMode.ADV_X2_THEN_KILLER))
    sequence = ["us", "us", "us", "them", "them", "them", "us", "them", "us", "us"]

    states = []
    for team in sequence:
        states.append(dispatcher.state)
        dispatcher.add_point(team)

    for expected in reversed(states):
        dispatcher.undo_last_point()
        assert dispatcher.state == expected

    assert dispatcher.state == MatchState()


def test_undo_message_describes_restored_score():
    dispatcher = CommandDispatcher()
    play(dispatcher, ["us", "us"])

    assert dispatcher.undo_last_point() == "Undone. 15 - 0"
    assert dispatcher.last_action == "Undone"


def test_undo_empty_history_is_repeatable_noop():
    dispatcher = CommandDispatcher()

    assert dispatcher.undo_last_point() == NOTHING_TO_UNDO
    assert dispatcher.undo_last_point() == NOTHING_TO_UNDO
    assert dispatcher.state == MatchState()


def test_undo_across_set_boundary():
    dispatcher = CommandDispatcher()
    play(dispatcher, ["them"] * 24)

    assert dispatcher.state.set_history == (TeamScore(us=0, them=6),)

    dispatcher.undo_last_point()

    assert dispatcher.state.set_history == ()
    assert dispatcher.state.games == TeamScore(us=0, them=5)
    assert dispatcher.state.points == TeamScore(us=0, them=3)


# ---------------------------------------------------------
# reset
# ---------------------------------------------------------

def test_reset_clears_state_and_history():
    dispatcher = CommandDispatcher()
    play(dispatcher, ["us", "them", "us"] * 10)

    assert dispatcher.reset_match() == MATCH_RESET

    assert dispatcher.state == MatchState()
    assert dispatcher.history_size == 0
    assert dispatcher.undo_last_point() == NOTHING_TO_UNDO


def test_reset_keeps_config():
    config = MatchConfig(rule66=Rule66.PRO_SET_8)
    dispatcher = CommandDispatcher(config)

    dispatcher.reset_match()

    assert dispatcher.config == config


# ---------------------------------------------------------
# dispatch
# ---------------------------------------------------------

def test_dispatch_known_intents():
    dispatcher = CommandDispatcher()

    assert dispatcher.dispatch(ADD_POINT, {"team": "them"}) == "0 - 15"
    assert dispatcher.dispatch(UNDO_LAST_POINT) == "Undone. 0 - 0"
    assert dispatcher.dispatch(RESET_MATCH, {}) == MATCH_RESET


@pytest.mark.parametrize("intent, args", [
    ("addPoints", {"team": "us"}),
    ("setScore", {}),
    (ADD_POINT, {"team": "blue"}),
    (ADD_POINT, {}),
    (ADD_POINT, None),
    (ADD_POINT, ["us"]),
    (ADD_POINT, "us"),
    (UNDO_LAST_POINT, ["x"]),
])
def test_dispatch_ignores_unknown_input(intent, args):
    dispatcher = CommandDispatcher()

    assert dispatcher.dispatch(intent, args) is None
    assert dispatcher.state == MatchState()
    assert dispatcher.history_size == 0


# ---------------------------------------------------------
# configure
# ---------------------------------------------------------

def test_config_change_applies_on_next_point():
    dispatcher = CommandDispatcher()
    play(dispatcher, ["us", "us", "us", "them", "them", "them"])

    assert dispatcher.describe() == "Killer point!"

    dispatcher.configure(deuce_mode=DeuceMode.ADV_X2_THEN_KILLER)

    assert dispatcher.describe() == "Deuce"
    assert dispatcher.add_point("us") == "Advantage Blue"


def test_configure_accepts_plain_strings():
    dispatcher = CommandDispatcher()

    config = dispatcher.configure(rule66="PRO_SET_8", sets_to_win=2)

    assert config.rule66 == Rule66.PRO_SET_8
    assert config.deuce_mode == DeuceMode.IMMEDIATE_KILLER
    assert config.sets_to_win == 2


def test_configure_rejects_unknown_rule():
    dispatcher = CommandDispatcher()

    with pytest.raises(InvalidConfigError):
        dispatcher.configure(rule66="FIRST_TO_10")


def test_clear_match_limit():
    dispatcher = CommandDispatcher(MatchConfig(sets_to_win=1))

    config = dispatcher.clear_match_limit()
    play(dispatcher, ["us"] * 48)

    assert config.sets_to_win is None
    assert dispatcher.state.sets.us == 2
    assert dispatcher.state.is_finished is False


def test_clear_match_limit_reopens_decided_match():
    dispatcher = CommandDispatcher(MatchConfig(sets_to_win=1))
    play(dispatcher, ["us"] * 24)

    assert dispatcher.state.winner == "us"

    dispatcher.clear_match_limit()

    assert dispatcher.state.is_finished is False
    assert dispatcher.add_point("them") == "0 - 15"
    assert dispatcher.state.sets == TeamScore(us=1, them=0)


def test_raising_match_limit_reopens_decided_match():
    dispatcher = CommandDispatcher(MatchConfig(sets_to_win=1))
    play(dispatcher, ["us"] * 24)

    dispatcher.configure(sets_to_win=2)

    assert dispatcher.add_point("them") == "0 - 15"
    play(dispatcher, ["us"] * 23)
    assert dispatcher.add_point("us") == "Match Blue!"


def test_config_change_keeps_match_decided_when_limit_reached():
    dispatcher = CommandDispatcher(MatchConfig(sets_to_win=1))
    play(dispatcher, ["us"] * 24)

    dispatcher.configure(rule66=Rule66.PRO_SET_8)

    assert dispatcher.state.winner == "us"
    assert dispatcher.add_point("them") == "Match Blue!"


# ---------------------------------------------------------
# snapshot
# ---------------------------------------------------------

def test_snapshot():
    dispatcher = CommandDispatcher()
    play(dispatcher, ["us"] * 4 + ["them", "them", "them", "us", "us", "us"])

    snapshot = dispatcher.snapshot(timestamp=5.0)

    assert snapshot.timestamp == 5.0
    assert snapshot.games_us == 1
    assert snapshot.points_us == "40"
    assert snapshot.points_them == "40"
    assert snapshot.is_killer_point is True
    assert snapshot.message == "Killer point!"


# ---------------------------------------------------------
# Concurrency
# ---------------------------------------------------------

def test_concurrent_commands_are_serialized():
    dispatcher = CommandDispatcher(MatchConfig(deuce_mode=DeuceMode.ADV_X2_THEN_KILLER))

    def worker(team):
        for _ in range(200):
            dispatcher.add_point(team)

    threads = [threading.Thread(target=worker, args=(t,)) for t in ("us", "them", "us", "them")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    state = dispatcher.state
    assert dispatcher.history_size == 800
    assert len(state.set_history) == state.sets.us + state.sets.them
