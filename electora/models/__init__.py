from electora.models.candidate import Candidate
from electora.models.election import Election
from electora.models.ledger_event import LedgerEvent
from electora.models.user import User
from electora.models.voter import Voter

__all__ = [
    "User",
    "Election",
    "Candidate",
    "Voter",
    "LedgerEvent",
]
