class MatchValidationError(ValueError):
    pass


class InvalidTeamError(MatchValidationError):
    pass


class InvalidConfigError(MatchValidationError):
    pass
