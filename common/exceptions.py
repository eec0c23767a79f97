class RecommenderError(Exception):
    pass


class InvalidArgumentError(RecommenderError, ValueError):
    pass


class DuplicateInteractionError(RecommenderError):
    pass
