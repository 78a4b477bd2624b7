from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

TEAMS = ("us", "them")


def other_team(team: str) -> str:
    return "them" if team == "us" else "us"


class Rule66(str, Enum):
    """What happens when a set reaches 6-6 in games."""
    TIE_BREAK = "TIE_BREAK"
    PRO_SET_8 = "PRO_SET_8"


class DeuceMode(str, Enum):
    """How a game at 40-40 is decided."""
    IMMEDIATE_KILLER = "IMMEDIATE_KILLER"
    ADV_X2_THEN_KILLER = "ADV_X2_THEN_KILLER"


@dataclass(frozen=True)
class TeamScore:
    us: int = 0
    them: int = 0

    def of(self, team: str) -> int:
        return getattr(self, team)

    def incremented(self, team: str) -> "TeamScore":
        return replace(self, **{team: self.of(team) + 1})

    def with_value(self, team: str, value: int) -> "TeamScore":
        return replace(self, **{team: value})


@dataclass(frozen=True)
class MatchState:
    points: TeamScore = field(default_factory=TeamScore)
    games: TeamScore = field(default_factory=TeamScore)
    sets: TeamScore = field(default_factory=TeamScore)
    set_history: Tuple[TeamScore, ...] = ()
    is_tie_break: bool = False
    tie_break_points: TeamScore = field(default_factory=TeamScore)
    deuce_count: int = 0
    winner: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.winner is not None


@dataclass(frozen=True)
class MatchConfig:
    rule66: Rule66 = Rule66.TIE_BREAK
    deuce_mode: DeuceMode = DeuceMode.IMMEDIATE_KILLER
    sets_to_win: Optional[int] = None


@dataclass(frozen=True)
class MatchHistoryEntry:
    state: MatchState
    timestamp: float


# --- ENGINE OUTPUT ---

@dataclass(frozen=True)
class ScoreUpdate:
    state: MatchState
    message: str
    game_won: bool = False
    set_won: bool = False
    tie_break_started: bool = False
    match_won: bool = False


# --- REPLAY / DISPLAY TYPES ---

@dataclass
class PointEvent:
    winner: str
    timestamp: float


@dataclass(frozen=True)
class MatchSnapshot:
    timestamp: float
    points_us: str
    points_them: str
    games_us: int
    games_them: int
    sets_us: int
    sets_them: int
    set_history: Tuple[Tuple[int, int], ...]
    is_tie_break: bool
    is_killer_point: bool
    message: str
    is_finished: bool
    winner: Optional[str]
