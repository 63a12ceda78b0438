"""Where subject names come from.

Two kinds of source exist. Pools (a text file, or the ``subject_name``
table) hand out all of a game's names up front, sampled without
replacement; the Faker source makes names up one round at a time. Either
way a name the age oracle has no age for is swapped for an unused one
(``resolve_subject``), within a bounded number of lookups.
"""

import random

from faker import Faker
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from guessage.services.games.errors import NameResolutionExhausted, PersistenceFailure


def retry_until_resolved(attempt, limit: int):
    """Call ``attempt()`` until it returns something other than None.

    Gives up with ``NameResolutionExhausted`` after ``limit`` calls.
    """
    if limit < 1:
        raise ValueError('limit must be at least 1')
    for _ in range(limit):
        result = attempt()
        if result is not None:
            return result
    raise NameResolutionExhausted(f'Gave up after {limit} attempts', attempts=limit)


def load_names_file(path):
    """Read one name per line, dropping blanks and repeats but keeping order."""
    seen = set()
    names = []
    with open(path, encoding='utf-8') as fh:
        for line in fh:
            name = line.strip()
            if name and name not in seen:
                seen.add(name)
                names.append(name)
    return names


class FileNamePool:
    """Samples names from a static text file."""

    lazy = False

    def __init__(self, path, rng=None):
        self.path = path
        self.rng = rng or random.Random()
        self._names = None

    @property
    def names(self):
        if self._names is None:
            self._names = load_names_file(self.path)
        return self._names

    def pick_names(self, count):
        pool = self.names
        if len(pool) < count:
            raise NameResolutionExhausted(f'Name file {self.path} has only {len(pool)} names')
        return self.rng.sample(pool, count)

    def substitute(self, exclude):
        choices = [n for n in self.names if n not in exclude]
        if not choices:
            raise NameResolutionExhausted(f'Name file {self.path} has no unused names left')
        return self.rng.choice(choices)


class DatabaseNamePool:
    """Samples names from the ``subject_name`` table."""

    lazy = False

    def pick_names(self, count):
        from guessage import db
        from guessage.models import SubjectName

        try:
            rows = SubjectName.query.order_by(func.random()).limit(count).all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceFailure('Could not read subject names') from exc
        if len(rows) < count:
            raise NameResolutionExhausted(f'Name table has only {len(rows)} names')
        return [row.name for row in rows]

    def substitute(self, exclude):
        from guessage import db
        from guessage.models import SubjectName

        try:
            row = (
                SubjectName.query
                .filter(SubjectName.name.notin_(list(exclude)))
                .order_by(func.random())
                .first()
            )
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceFailure('Could not read subject names') from exc
        if row is None:
            raise NameResolutionExhausted('Name table has no unused names left')
        return row.name


class FakerNameSource:
    """Makes up first names, one round at a time."""

    lazy = True

    def __init__(self, retry_limit=10, faker=None):
        self.retry_limit = retry_limit
        self.faker = faker or Faker()

    def pick_names(self, count):
        return None

    def substitute(self, exclude):
        for _ in range(self.retry_limit):
            name = self.faker.first_name()
            if name not in exclude:
                return name
        raise NameResolutionExhausted('Faker kept repeating used names', attempts=self.retry_limit)


def resolve_subject(game, source, oracle, limit: int):
    """Pick the subject for the round in progress and look up its age.

    Starts from the game's own subject (its next pooled name, or the
    drawn name of a lazy game). Each name the oracle has no age for is
    swapped for an unused one from ``source``; after ``limit`` lookups
    without an age, ``NameResolutionExhausted`` is raised.
    Returns ``(name, age)``; the game itself is left unchanged.
    """
    tried = set(game.used_names())
    if game.names is not None:
        tried.update(game.names)
    candidate = game.next_subject()

    def attempt():
        nonlocal candidate
        if candidate is None:
            candidate = source.substitute(tried)
        tried.add(candidate)
        age = oracle.lookup(candidate)
        if age is None:
            candidate = None
            return None
        return candidate, age

    return retry_until_resolved(attempt, limit)


def build_name_source(app):
    kind = (app.config.get('NAME_SOURCE') or 'file').lower()
    if kind == 'file':
        source = FileNamePool(app.config['NAMES_FILE'])
    elif kind == 'database':
        source = DatabaseNamePool()
    elif kind == 'faker':
        source = FakerNameSource(retry_limit=int(app.config.get('NAME_RETRY_LIMIT', 10)))
    else:
        raise ValueError(f'Unknown NAME_SOURCE {kind!r}; expected file, database or faker')
    app.extensions['name_source'] = source
    return source
