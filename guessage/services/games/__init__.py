"""Game domain services: the guessing session and its scoring.

This package contains pure domain logic that is imported by the HTTP
routes, keeping transport and storage concerns separated from core game
mechanics.
"""

from .errors import (
    GameError,
    InvalidGameState,
    MalformedGuess,
    NameResolutionExhausted,
    NoActiveGame,
    PersistenceFailure,
    UpstreamError,
    UpstreamTimeout,
)
from .scoring import MAX_DIFF, MAX_SCORE, coerce_guess, score_guess
from .session import ROUNDS, GameSession, RoundRecord
