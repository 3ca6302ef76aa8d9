from datetime import datetime, timezone

from electora.extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


class Election(db.Model):
    __tablename__ = "elections"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    organiser = db.Column(db.String(128), nullable=False)
    # Last id handed out to each registry; bumped in the same transaction as the insert.
    candidate_seq = db.Column(db.Integer, nullable=False, default=0)
    voter_seq = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "title": self.title,
            "organiser": self.organiser,
            "candidate_count": self.candidate_seq,
            "voter_count": self.voter_seq,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
