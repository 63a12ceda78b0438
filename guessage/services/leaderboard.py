from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from guessage import db
from guessage.models import LeaderboardEntry
from guessage.services.games.errors import PersistenceFailure

USERNAME_MAX = 64


def record_score(username, score: int) -> LeaderboardEntry:
    """Append a finished game's score. Blank names are recorded as 'anonymous'."""
    name = (username or '').strip()[:USERNAME_MAX] or 'anonymous'
    entry = LeaderboardEntry(username=name, score=int(score))
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[leaderboard] write failed user={name!r} score={score}: {exc}")
        raise PersistenceFailure('Could not save your score') from exc
    current_app.logger.info(f"[leaderboard] recorded user={name!r} score={entry.score}")
    return entry


def top_scores(limit=5):
    try:
        return (
            LeaderboardEntry.query
            .order_by(LeaderboardEntry.score.desc(), LeaderboardEntry.created_at.asc(), LeaderboardEntry.id.asc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[leaderboard] read failed: {exc}")
        raise PersistenceFailure('Could not load the leaderboard') from exc
