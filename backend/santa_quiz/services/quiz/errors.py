class QuestionSourceError(Exception):
    """The question generator could not supply a usable question."""


class TransientFetchError(QuestionSourceError):
    """Generator unreachable, non-2xx, or it reported an error."""


class MalformedResponseError(QuestionSourceError):
    """Generator answered but the payload is not a valid question."""


class PersistenceError(Exception):
    """The leaderboard store rejected a write."""
