import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Optional

from referee.config import (
    DEFAULT_DEUCE_MODE,
    DEFAULT_RULE_66,
    DEFAULT_SETS_TO_WIN,
    TEAM_NAMES,
)
from referee.engine import ScoreEngine, build_snapshot, describe_score
from referee.exceptions import InvalidConfigError, InvalidTeamError
from referee.history import MatchHistory
from referee.models import DeuceMode, MatchConfig, MatchSnapshot, MatchState, Rule66

logger = logging.getLogger(__name__)

ADD_POINT = "addPoint"
UNDO_LAST_POINT = "undoLastPoint"
RESET_MATCH = "resetMatch"

INTENTS = (ADD_POINT, UNDO_LAST_POINT, RESET_MATCH)

NOTHING_TO_UNDO = "Nothing to undo."
MATCH_RESET = "Match reset."


class CommandDispatcher:
    """
    Single owner of one padel match.

    Responsibilities:
    - Hold the current MatchState, MatchConfig and undo history
    - Serialize tap and voice commands through one lock
    - Map the three intents onto the ScoreEngine and narrate the result
    """

    def __init__(self, config: Optional[MatchConfig] = None):
        self._config = config or MatchConfig(
            rule66=DEFAULT_RULE_66,
            deuce_mode=DEFAULT_DEUCE_MODE,
            sets_to_win=DEFAULT_SETS_TO_WIN,
        )
        self._engine = ScoreEngine(self._config)
        self._state = MatchState()
        self._history = MatchHistory()
        self._last_action = ""
        self._lock = threading.RLock()

    # ---------------------------------------------------------
    # Commands
    # ---------------------------------------------------------

    def add_point(self, team: str) -> str:
        with self._lock:
            update = self._engine.apply_point(self._state, team)

            # Points after the match is decided change nothing
            if update.state is self._state:
                return update.message

            self._history.record(self._state)
            self._state = update.state
            self._last_action = f"Point {TEAM_NAMES[team]}"

            logger.debug(f"Point {team}: {update.message}")
            return update.message

    def undo_last_point(self) -> str:
        with self._lock:
            previous = self._history.undo()

            if previous is None:
                return NOTHING_TO_UNDO

            self._state = previous
            self._last_action = "Undone"

            return f"Undone. {describe_score(previous, self._config)}"

    def reset_match(self) -> str:
        with self._lock:
            self._state = MatchState()
            self._history.clear()
            self._last_action = "Match reset"

            logger.info("Match reset")
            return MATCH_RESET

    def dispatch(self, intent: str, args: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """
        Run one of the three intents.
        Anything outside the closed set is ignored and returns None.
        """
        args = args or {}

        if not isinstance(args, dict):
            logger.warning(f"Ignoring {intent!r}: malformed args {args!r}")
            return None

        if intent == ADD_POINT:
            try:
                return self.add_point(args.get("team"))
            except InvalidTeamError as e:
                logger.warning(f"Ignoring addPoint: {e}")
                return None

        if intent == UNDO_LAST_POINT:
            return self.undo_last_point()

        if intent == RESET_MATCH:
            return self.reset_match()

        logger.warning(f"Ignoring unknown intent: {intent!r}")
        return None

    # ---------------------------------------------------------
    # Configuration
    # ---------------------------------------------------------

    def configure(
        self,
        rule66: Optional[Rule66] = None,
        deuce_mode: Optional[DeuceMode] = None,
        sets_to_win: Optional[int] = None,
    ) -> MatchConfig:
        """
        Change the rules. Takes effect on the next point, the current
        state is not checked against the new rules, except that a decided
        match is reopened when its winner no longer reaches sets_to_win.
        """
        changes: Dict[str, Any] = {}
        try:
            if rule66 is not None:
                changes["rule66"] = Rule66(rule66)
            if deuce_mode is not None:
                changes["deuce_mode"] = DeuceMode(deuce_mode)
        except ValueError as e:
            raise InvalidConfigError(str(e)) from e

        if sets_to_win is not None:
            changes["sets_to_win"] = sets_to_win

        with self._lock:
            config = self._use_config(replace(self._config, **changes))

            logger.info(f"Config updated: {config}")
            return config

    def clear_match_limit(self) -> MatchConfig:
        with self._lock:
            return self._use_config(replace(self._config, sets_to_win=None))

    def _use_config(self, config: MatchConfig) -> MatchConfig:
        self._engine = ScoreEngine(config)
        self._config = config

        # A decided match reopens when the new limit is out of reach
        winner = self._state.winner
        if winner is not None:
            limit = config.sets_to_win
            if limit is None or self._state.sets.of(winner) < limit:
                self._state = replace(self._state, winner=None)
                logger.info("Match reopened")

        return config

    # ---------------------------------------------------------
    # Read access
    # ---------------------------------------------------------

    @property
    def state(self) -> MatchState:
        with self._lock:
            return self._state

    @property
    def config(self) -> MatchConfig:
        with self._lock:
            return self._config

    @property
    def history_size(self) -> int:
        with self._lock:
            return len(self._history)

    @property
    def last_action(self) -> str:
        with self._lock:
            return self._last_action

    def describe(self) -> str:
        with self._lock:
            return describe_score(self._state, self._config)

    def snapshot(self, timestamp: float = 0.0) -> MatchSnapshot:
        with self._lock:
            return build_snapshot(self._state, self._config, timestamp)
