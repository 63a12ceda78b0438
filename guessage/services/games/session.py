from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidGameState, NoActiveGame
from .scoring import MAX_DIFF, coerce_guess, score_guess

ROUNDS = 5
TIME_FORMAT = '%m/%d/%Y %H:%M:%S'


class RoundRecord:
    """One scored guess. Read-only once created."""

    __slots__ = ('_subject_name', '_user_guess', '_true_age', '_score')

    def __init__(self, subject_name: str, user_guess, true_age, score: int):
        self._subject_name = subject_name
        self._user_guess = user_guess
        self._true_age = true_age
        self._score = score

    @property
    def subject_name(self):
        return self._subject_name

    @property
    def user_guess(self):
        return self._user_guess

    @property
    def true_age(self):
        return self._true_age

    @property
    def score(self):
        return self._score

    def to_dict(self):
        return {
            'subject_name': self._subject_name,
            'userGuess': self._user_guess,
            'trueAge': self._true_age,
            'score': self._score,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['subject_name'], data['userGuess'], data['trueAge'], int(data['score']))

    def __eq__(self, other):
        if not isinstance(other, RoundRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"RoundRecord(subject_name={self._subject_name!r}, user_guess={self._user_guess!r}, "
                f"true_age={self._true_age!r}, score={self._score})")


class GameSession:
    """A five-round age guessing game.

    The session is rebuilt from the stored snapshot at the start of every
    request, mutated at most once by ``make_guess`` and written back with
    ``to_snapshot``. State is kept private; callers go through the methods
    below, which keep these invariants:

    - ``0 <= attempts <= ROUNDS`` and ``len(history) == attempts``
    - ``total_score == sum(r.score for r in history)``
    - ``names``, when present, holds ``ROUNDS`` distinct names; names of
      rounds already played never change
    - ``time`` is only set once the game is over

    Games built from a name pool carry their ``names`` from the start. Games
    fed by a generator have no name list. Either way, before a round can be
    guessed the caller settles its subject and true age with
    ``assign_subject``; a pooled name without a known age may be swapped
    for another unused name at that point.
    """

    def __init__(self, names: Optional[List[str]] = None):
        if names is not None:
            names = list(names)
            if len(names) != ROUNDS or len(set(names)) != ROUNDS:
                raise ValueError(f'A game needs exactly {ROUNDS} distinct names, got {names!r}')
        self._names: Optional[Tuple[str, ...]] = tuple(names) if names is not None else None
        self._attempts = 0
        self._total_score = 0
        self._history: Tuple[RoundRecord, ...] = ()
        self._time: Optional[str] = None
        self._current: Optional[str] = None
        self._current_age = None

    @classmethod
    def start(cls, name_source) -> 'GameSession':
        """Create a fresh game from a name source.

        Pooled sources hand over all names now; lazy sources return ``None``
        from ``pick_names`` and are consulted once per round instead.
        """
        return cls(names=name_source.pick_names(ROUNDS))

    # -- queries ---------------------------------------------------------

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def total_score(self) -> int:
        return self._total_score

    @property
    def history(self) -> Tuple[RoundRecord, ...]:
        return self._history

    @property
    def time(self) -> Optional[str]:
        return self._time

    @property
    def names(self) -> Optional[Tuple[str, ...]]:
        return self._names

    @property
    def is_lazy(self) -> bool:
        return self._names is None

    @property
    def current_age(self):
        """True age of the round in progress, once ``assign_subject`` settled it."""
        return self._current_age

    def is_over(self) -> bool:
        return self._attempts >= ROUNDS

    def remaining(self) -> int:
        return ROUNDS - self._attempts

    def used_names(self) -> List[str]:
        return [r.subject_name for r in self._history]

    def next_subject(self) -> Optional[str]:
        """Name to guess in the round in progress, or None if there is none yet."""
        if self.is_over():
            return None
        if self._names is not None:
            return self._names[self._attempts]
        return self._current

    def summary(self) -> Dict[str, Any]:
        return {
            'score': self._total_score,
            'history': [r.to_dict() for r in self._history],
            'time': self._time,
        }

    # -- mutations -------------------------------------------------------

    def assign_subject(self, name: str, age) -> None:
        """Settle the subject and true age of the round in progress."""
        if self.is_over():
            raise InvalidGameState('Game is already over')
        if self._current_age is not None:
            raise InvalidGameState(f'Round {self._attempts + 1} already has a subject')
        if name in self.used_names():
            raise InvalidGameState(f'{name!r} was already played')
        if self._names is not None:
            idx = self._attempts
            if name != self._names[idx]:
                if name in self._names:
                    raise InvalidGameState(f'{name!r} is already a later subject')
                self._names = self._names[:idx] + (name,) + self._names[idx + 1:]
        else:
            self._current = name
        self._current_age = age

    def make_guess(self, subject_name: str, true_age, user_guess, max_diff=MAX_DIFF) -> RoundRecord:
        """Score ``user_guess`` against ``true_age`` and record the round."""
        if self.is_over():
            raise InvalidGameState('Game is already over')
        guess = coerce_guess(user_guess)
        record = RoundRecord(subject_name, guess, true_age, score_guess(true_age, guess, max_diff))
        self._history = self._history + (record,)
        self._total_score += record.score
        self._attempts += 1
        self._current = None
        self._current_age = None
        return record

    def finalize(self, now: Optional[datetime] = None) -> str:
        if not self.is_over():
            raise InvalidGameState(f'Game still has {self.remaining()} rounds to play')
        self._time = (now or datetime.now()).strftime(TIME_FORMAT)
        return self._time

    # -- snapshots -------------------------------------------------------

    def to_snapshot(self) -> Dict[str, Any]:
        snapshot = {
            'attempts': self._attempts,
            'totalScore': self._total_score,
            'history': [r.to_dict() for r in self._history],
            'time': self._time,
        }
        if self._names is not None:
            snapshot['names'] = list(self._names)
        if self._current is not None:
            snapshot['current'] = self._current
        if self._current_age is not None:
            snapshot['currentAge'] = self._current_age
        return snapshot

    @classmethod
    def from_snapshot(cls, snapshot: Optional[Dict[str, Any]]) -> 'GameSession':
        """Rebuild a game from its stored snapshot.

        Raises ``NoActiveGame`` when there is no snapshot or when it does not
        describe a consistent game.
        """
        if not snapshot:
            raise NoActiveGame('No game in progress')
        try:
            names = snapshot.get('names')
            game = cls(names=names)
            history = tuple(RoundRecord.from_dict(r) for r in snapshot['history'])
            attempts = int(snapshot['attempts'])
            total_score = int(snapshot['totalScore'])
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise NoActiveGame(f'Stored game is unreadable: {exc}') from exc

        if not 0 <= attempts <= ROUNDS or len(history) != attempts:
            raise NoActiveGame(f'Stored game has {len(history)} rounds but {attempts} attempts')
        if total_score != sum(r.score for r in history):
            raise NoActiveGame('Stored game score does not match its history')
        time = snapshot.get('time')
        if time is not None and attempts < ROUNDS:
            raise NoActiveGame('Stored game has an end time but is not over')

        game._history = history
        game._attempts = attempts
        game._total_score = total_score
        game._time = time
        current = snapshot.get('current')
        if current is not None:
            if names is not None or attempts >= ROUNDS:
                raise NoActiveGame('Stored game has a stray current subject')
            game._current = current
        current_age = snapshot.get('currentAge')
        if current_age is not None:
            if attempts >= ROUNDS or (names is None and current is None):
                raise NoActiveGame('Stored game has a stray subject age')
            game._current_age = current_age
        return game

    def __repr__(self):
        return f'GameSession(attempts={self._attempts}, total_score={self._total_score}, time={self._time!r})'
