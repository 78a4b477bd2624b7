from referee.models import DeuceMode, Rule66

DEFAULT_RULE_66 = Rule66.TIE_BREAK
DEFAULT_DEUCE_MODE = DeuceMode.IMMEDIATE_KILLER
# None: sets accumulate until the match is reset
DEFAULT_SETS_TO_WIN = None

TIE_BREAK_POINTS = 7
SET_LIMITS = {
    Rule66.TIE_BREAK: 6,
    Rule66.PRO_SET_8: 8,
}

POINT_LABELS = ["0", "15", "30", "40"]
ADVANTAGE_LABEL = "AD"

TEAM_NAMES = {
    "us": "Blue",
    "them": "Red",
}
