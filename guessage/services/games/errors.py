"""Failure types raised by the game core and its collaborators.

Every error here is recoverable at the request boundary: routes catch
``GameError`` subclasses and redirect or render a retry page instead of
letting the request crash.
"""


class GameError(Exception):
    """Base class for all game failures."""


class NameResolutionExhausted(GameError):
    """No usable subject could be found within the retry budget."""

    def __init__(self, message='Could not find a name with a known age', attempts=None):
        super().__init__(message)
        self.attempts = attempts


class UpstreamError(GameError):
    """The age oracle answered with an error or an unreadable body."""


class UpstreamTimeout(UpstreamError):
    """The age oracle could not be reached in time."""


class NoActiveGame(GameError):
    """The session holds no game, or the stored snapshot is unusable."""


class InvalidGameState(GameError):
    """An operation was attempted in the wrong state (e.g. a sixth guess)."""


class MalformedGuess(GameError, ValueError):
    """The submitted guess is not a number."""


class PersistenceFailure(GameError):
    """A read or write against the database failed."""
