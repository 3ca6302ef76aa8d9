from datetime import datetime, timezone

from electora.extensions import db

CANDIDATE_REGISTERED = "CandidateRegistered"
VOTER_REGISTERED = "VoterRegistered"
VOTE_CAST = "VoteCast"
VOTE_CHANGED = "VoteChanged"


def _utcnow():
    return datetime.now(timezone.utc)


class LedgerEvent(db.Model):
    __tablename__ = "ledger_events"

    sequence = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(40), nullable=False)
    voter = db.Column(db.String(128), nullable=True)
    candidate = db.Column(db.String(128), nullable=True)
    payload = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "sequence": self.sequence,
            "kind": self.kind,
            "voter": self.voter,
            "candidate": self.candidate,
            "payload": self.payload,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
