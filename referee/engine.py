from dataclasses import replace
from typing import Optional

from referee.config import (
    ADVANTAGE_LABEL,
    POINT_LABELS,
    SET_LIMITS,
    TEAM_NAMES,
    TIE_BREAK_POINTS,
)
from referee.exceptions import InvalidConfigError, InvalidTeamError
from referee.models import (
    DeuceMode,
    MatchConfig,
    MatchSnapshot,
    MatchState,
    Rule66,
    ScoreUpdate,
    TEAMS,
    TeamScore,
    other_team,
)


class ScoreEngine:
    """
    Padel score engine.

    Responsibilities:
    - Turn "point won by team X" into the successor MatchState
    - Handle game, tie-break, set & match lifecycle
    - Produce the narration message for the new score

    The engine never mutates the state it receives. MatchState is frozen and
    every transition builds a new value, sharing the untouched parts.
    """

    def __init__(self, config: Optional[MatchConfig] = None):
        self.config = config or MatchConfig()
        self._validate_config()

    # =========================================================
    # PUBLIC API
    # =========================================================

    def apply_point(self, state: MatchState, winner: str) -> ScoreUpdate:
        self._validate_winner(winner)

        # Finished match → state stays as it is
        if state.is_finished:
            return ScoreUpdate(state=state, message=self._match_message(state.winner))

        if state.is_tie_break:
            state, game_won = self._play_tie_break_point(state, winner)
        else:
            state, game_won = self._play_game_point(state, winner)

        if not game_won:
            return ScoreUpdate(state=state, message=describe_score(state, self.config))

        return self._finalize_game(state, winner)

    # =========================================================
    # VALIDATION
    # =========================================================

    def _validate_config(self):
        if self.config.rule66 not in SET_LIMITS:
            raise InvalidConfigError(f"Unknown rule66: {self.config.rule66}")

        if self.config.deuce_mode not in tuple(DeuceMode):
            raise InvalidConfigError(f"Unknown deuce mode: {self.config.deuce_mode}")

        sets_to_win = self.config.sets_to_win
        if sets_to_win is not None and sets_to_win <= 0:
            raise InvalidConfigError("sets_to_win must be positive")

    def _validate_winner(self, winner: str):
        if winner not in TEAMS:
            raise InvalidTeamError(f"Invalid team: {winner}")

    # =========================================================
    # POINT LOGIC
    # =========================================================

    def _play_tie_break_point(self, state: MatchState, winner: str):
        loser = other_team(winner)
        tie_break_points = state.tie_break_points.incremented(winner)

        p_w = tie_break_points.of(winner)
        p_l = tie_break_points.of(loser)

        if p_w >= TIE_BREAK_POINTS and p_w - p_l >= 2:
            return replace(state, is_tie_break=False, tie_break_points=TeamScore()), True

        return replace(state, tie_break_points=tie_break_points), False

    def _play_game_point(self, state: MatchState, winner: str):
        loser = other_team(winner)
        p_w = state.points.of(winner)
        p_l = state.points.of(loser)

        if p_w == 3 and p_l == 3:
            if self._is_killer(state):
                return state, True
            # Advantage
            return replace(state, points=state.points.with_value(winner, 4)), False

        if p_w == 4:
            return state, True

        if p_l == 4:
            # Back to deuce
            return replace(
                state,
                points=TeamScore(us=3, them=3),
                deuce_count=state.deuce_count + 1,
            ), False

        if p_w == 3:
            return state, True

        return replace(state, points=state.points.incremented(winner)), False

    def _is_killer(self, state: MatchState) -> bool:
        return (
            self.config.deuce_mode == DeuceMode.IMMEDIATE_KILLER
            or state.deuce_count >= 2
        )

    # =========================================================
    # GAME / SET / MATCH LOGIC
    # =========================================================

    def _finalize_game(self, state: MatchState, winner: str) -> ScoreUpdate:
        games = state.games.incremented(winner)
        state = replace(
            state,
            points=TeamScore(),
            tie_break_points=TeamScore(),
            deuce_count=0,
            games=games,
        )

        name = TEAM_NAMES[winner]

        if self._starts_tie_break(games):
            return ScoreUpdate(
                state=replace(state, is_tie_break=True),
                message=f"Game {name}! Tie-break!",
                game_won=True,
                tie_break_started=True,
            )

        if not self._is_set_won(games, winner):
            return ScoreUpdate(state=state, message=f"Game {name}!", game_won=True)

        sets = state.sets.incremented(winner)
        state = replace(
            state,
            sets=sets,
            set_history=state.set_history + (games,),
            games=TeamScore(),
        )

        sets_to_win = self.config.sets_to_win
        if sets_to_win is not None and sets.of(winner) >= sets_to_win:
            return ScoreUpdate(
                state=replace(state, winner=winner),
                message=self._match_message(winner),
                game_won=True,
                set_won=True,
                match_won=True,
            )

        return ScoreUpdate(
            state=state,
            message=f"Set {name}!",
            game_won=True,
            set_won=True,
        )

    def _starts_tie_break(self, games: TeamScore) -> bool:
        return (
            self.config.rule66 == Rule66.TIE_BREAK
            and games.us == 6
            and games.them == 6
        )

    def _is_set_won(self, games: TeamScore, winner: str) -> bool:
        g_w = games.of(winner)
        g_l = games.of(other_team(winner))
        limit = set_limit(self.config)

        if g_w >= limit and g_w - g_l >= 2:
            return True

        if self.config.rule66 == Rule66.TIE_BREAK:
            # Tie-break winner
            return g_w == 7 and g_l == 6

        # Pro-set is capped at 8 games
        return g_w == 8

    @staticmethod
    def _match_message(winner: str) -> str:
        return f"Match {TEAM_NAMES[winner]}!"


# =========================================================
# MODULE HELPERS
# =========================================================

def apply_point(state: MatchState, config: MatchConfig, winner: str) -> ScoreUpdate:
    """Compute the state following a point won by ``winner``."""
    return ScoreEngine(config).apply_point(state, winner)


def set_limit(config: MatchConfig) -> int:
    return SET_LIMITS[config.rule66]


def is_killer_point(state: MatchState, config: MatchConfig) -> bool:
    """True when the next point decides the current game outright."""
    if state.is_tie_break:
        return False
    if state.points.us != 3 or state.points.them != 3:
        return False
    return config.deuce_mode == DeuceMode.IMMEDIATE_KILLER or state.deuce_count >= 2


def point_label(state: MatchState, team: str) -> str:
    if state.is_tie_break:
        return str(state.tie_break_points.of(team))

    points = state.points.of(team)
    if points == 4:
        return ADVANTAGE_LABEL
    return POINT_LABELS[points]


def describe_score(state: MatchState, config: MatchConfig) -> str:
    """Human readable description of the current point score."""
    if state.is_finished:
        return f"Match {TEAM_NAMES[state.winner]}!"

    if state.is_tie_break:
        return f"{state.tie_break_points.us} - {state.tie_break_points.them}"

    if state.points.us == 3 and state.points.them == 3:
        return "Killer point!" if is_killer_point(state, config) else "Deuce"

    for team in TEAMS:
        if state.points.of(team) == 4:
            return f"Advantage {TEAM_NAMES[team]}"

    return f"{POINT_LABELS[state.points.us]} - {POINT_LABELS[state.points.them]}"


def build_snapshot(
    state: MatchState,
    config: MatchConfig,
    timestamp: float,
    message: Optional[str] = None,
) -> MatchSnapshot:
    return MatchSnapshot(
        timestamp=timestamp,
        points_us=point_label(state, "us"),
        points_them=point_label(state, "them"),
        games_us=state.games.us,
        games_them=state.games.them,
        sets_us=state.sets.us,
        sets_them=state.sets.them,
        set_history=tuple((s.us, s.them) for s in state.set_history),
        is_tie_break=state.is_tie_break,
        is_killer_point=is_killer_point(state, config),
        message=message if message is not None else describe_score(state, config),
        is_finished=state.is_finished,
        winner=state.winner,
    )
