import math

from .errors import MalformedGuess

# A guess MAX_DIFF or more years off scores nothing.
MAX_DIFF = 50
MAX_SCORE = 5000


def coerce_guess(value):
    """Turn a submitted guess into a number.

    Accepts ints, floats and numeric strings (surrounding whitespace is
    ignored). Integral values come back as ``int``. Anything else, including
    NaN and infinities, raises ``MalformedGuess``.
    """
    if isinstance(value, bool):
        raise MalformedGuess(f'Guess must be a number, got {value!r}')
    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            raise MalformedGuess(f'Guess must be a number, got {value!r}') from None
    if isinstance(number, float):
        if not math.isfinite(number):
            raise MalformedGuess(f'Guess must be a finite number, got {value!r}')
        if number.is_integer():
            return int(number)
    return number


def score_guess(true_age, user_guess, max_diff=MAX_DIFF) -> int:
    """Score a single guess.

    Linear decay from ``MAX_SCORE`` at an exact guess down to 0 at
    ``max_diff`` years off; anything further away scores 0.
    """
    diff = abs(true_age - user_guess)
    if diff >= max_diff:
        return 0
    # round half up
    return int(math.floor(MAX_SCORE * (1 - diff / max_diff) + 0.5))
