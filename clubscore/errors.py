class ScoringInputError(ValueError):
    pass


class CompetitionNotFoundError(LookupError):
    pass
