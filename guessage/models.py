from datetime import datetime, timezone

from guessage import db


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False)
    score = db.Column(db.Integer, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'score': self.score,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class SubjectName(db.Model):
    """Candidate names for the database-backed name pool."""
    __tablename__ = 'subject_name'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}
