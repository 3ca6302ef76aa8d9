import threading
from contextlib import contextmanager

from flask import current_app, g

from electora.extensions import db
from electora.models import Candidate, Election, LedgerEvent, Voter
from electora.models.ledger_event import (
    CANDIDATE_REGISTERED,
    VOTE_CAST,
    VOTE_CHANGED,
    VOTER_REGISTERED,
)
from electora.services import signals
from electora.services.errors import (
    AlreadyRegistered,
    AlreadyVoted,
    ElectionNotInitialised,
    LedgerError,
    NotYetVoted,
    Unauthorized,
    UnknownCandidate,
    UnknownVoter,
)

DEFAULT_TITLE = "General Election"

# Single writer for every ledger in this process. The election row lock taken
# inside each transaction covers writers in other processes.
_write_lock = threading.RLock()


def _locked(query):
    # Rows read while writing are reloaded from the database, never taken from
    # objects the session loaded before the lock was acquired.
    return query.populate_existing().with_for_update()


def _locked_by_identity(model, identity):
    return _locked(model.query.filter_by(identity=identity)).first()


class _Transaction:
    def __init__(self, election):
        self.election = election
        self.notifications = []

    def emit(self, kind, signal, payload, voter=None, candidate=None):
        db.session.add(
            LedgerEvent(kind=kind, voter=voter, candidate=candidate, payload=payload)
        )
        self.notifications.append((signal, payload))


class ElectionLedger:
    """Registry of candidates and voters for one election, with a live tally.

    Every mutation runs as one serialized transaction: all preconditions are
    checked before anything is written, and the records, id counters and audit
    event commit together. Notifications go out after the commit, in ledger
    order.
    """

    def __init__(self, election_id):
        self.election_id = election_id

    @classmethod
    def initialise(cls, organiser, title=None):
        if not organiser:
            raise ValueError("An organiser identity is required.")

        with _write_lock:
            election = Election.query.first()
            if election is None:
                election = Election(
                    title=title or DEFAULT_TITLE,
                    organiser=organiser,
                    candidate_seq=0,
                    voter_seq=0,
                )
                db.session.add(election)
                db.session.commit()
                current_app.logger.info(
                    "Election %r initialised with organiser %s",
                    election.title,
                    organiser,
                )
            elif election.organiser != organiser:
                raise Unauthorized("The election organiser cannot be changed.")

            return cls(election.id)

    @classmethod
    def load(cls):
        election = Election.query.first()
        if election is None:
            return None
        return cls(election.id)

    @property
    def election(self):
        return db.session.get(Election, self.election_id)

    @property
    def organiser(self):
        return self.election.organiser

    @contextmanager
    def _serialized(self, operation):
        with _write_lock:
            try:
                election = _locked(
                    Election.query.filter_by(id=self.election_id)
                ).one()
                txn = _Transaction(election)
                yield txn
                db.session.commit()
            except LedgerError as err:
                db.session.rollback()
                current_app.logger.warning("%s rejected: %s", operation, err.code)
                raise
            except Exception:
                db.session.rollback()
                raise

            for signal, payload in txn.notifications:
                self._notify(signal, payload)

    def _notify(self, signal, payload):
        # The change is already committed; a failing receiver must not turn it
        # into an error for the caller or starve the other receivers.
        for receiver in signal.receivers_for(self):
            try:
                receiver(self, **payload)
            except Exception:
                current_app.logger.exception(
                    "Receiver %r of %s failed", receiver, signal.name
                )

    def _require_organiser(self, election, caller):
        if caller is None or caller != election.organiser:
            raise Unauthorized()

    def _require_voter(self, identity):
        voter = _locked_by_identity(Voter, identity)
        if voter is None:
            raise UnknownVoter(identity=identity)
        return voter

    def _require_candidate(self, identity):
        candidate = _locked_by_identity(Candidate, identity)
        if candidate is None:
            raise UnknownCandidate(identity=identity)
        return candidate

    def register_candidate(self, caller, name, age, symbol, identity):
        with self._serialized("register_candidate") as txn:
            self._require_organiser(txn.election, caller)
            if _locked_by_identity(Candidate, identity) is not None:
                raise AlreadyRegistered(registry="candidate", identity=identity)

            txn.election.candidate_seq += 1
            candidate = Candidate(
                id=txn.election.candidate_seq,
                name=name,
                age=age,
                symbol=symbol,
                identity=identity,
                vote_count=0,
            )
            db.session.add(candidate)
            record = candidate.to_dict()
            txn.emit(
                CANDIDATE_REGISTERED,
                signals.candidate_registered,
                {"record": record},
                candidate=identity,
            )

        current_app.logger.info("Registered candidate #%d %s", record["id"], identity)
        return candidate

    def register_voter(self, caller, name, age, identity):
        with self._serialized("register_voter") as txn:
            self._require_organiser(txn.election, caller)
            if _locked_by_identity(Voter, identity) is not None:
                raise AlreadyRegistered(registry="voter", identity=identity)

            txn.election.voter_seq += 1
            voter = Voter(
                id=txn.election.voter_seq,
                name=name,
                age=age,
                identity=identity,
                voted_for=None,
                has_voted=False,
            )
            db.session.add(voter)
            record = voter.to_dict()
            txn.emit(
                VOTER_REGISTERED,
                signals.voter_registered,
                {"record": record},
                voter=identity,
            )

        current_app.logger.info("Registered voter #%d %s", record["id"], identity)
        return voter

    def cast_vote(self, voter_identity, candidate_identity):
        with self._serialized("cast_vote") as txn:
            voter = self._require_voter(voter_identity)
            candidate = self._require_candidate(candidate_identity)
            if voter.has_voted:
                raise AlreadyVoted(identity=voter_identity)

            candidate.vote_count += 1
            voter.voted_for = candidate.identity
            voter.has_voted = True
            txn.emit(
                VOTE_CAST,
                signals.vote_cast,
                {"voter": voter_identity, "candidate": candidate_identity},
                voter=voter_identity,
                candidate=candidate_identity,
            )

        current_app.logger.info(
            "Vote cast by %s for %s", voter_identity, candidate_identity
        )

    def change_vote(self, voter_identity, new_candidate_identity):
        with self._serialized("change_vote") as txn:
            voter = self._require_voter(voter_identity)
            new_candidate = self._require_candidate(new_candidate_identity)
            if not voter.has_voted:
                raise NotYetVoted(identity=voter_identity)

            # Choosing the current candidate again is allowed: the decrement and
            # increment below hit the same row and the event is still recorded.
            previous = _locked_by_identity(Candidate, voter.voted_for)
            previous.vote_count -= 1
            new_candidate.vote_count += 1
            voter.voted_for = new_candidate.identity
            txn.emit(
                VOTE_CHANGED,
                signals.vote_changed,
                {
                    "voter": voter_identity,
                    "new_candidate": new_candidate_identity,
                    "previous_candidate": previous.identity,
                },
                voter=voter_identity,
                candidate=new_candidate_identity,
            )

        current_app.logger.info(
            "Vote changed by %s to %s", voter_identity, new_candidate_identity
        )

    def get_candidate(self, identity):
        return Candidate.query.filter_by(identity=identity).first()

    def get_voter(self, identity):
        return Voter.query.filter_by(identity=identity).first()

    def list_candidates(self):
        return Candidate.query.order_by(Candidate.id).all()

    def list_voters(self):
        return Voter.query.order_by(Voter.id).all()

    def total_votes(self):
        return db.session.query(
            db.func.coalesce(db.func.sum(Candidate.vote_count), 0)
        ).scalar()

    def tally_is_consistent(self):
        voted = Voter.query.filter_by(has_voted=True).count()
        return self.total_votes() == voted

    def events(self, after=0, limit=None):
        query = LedgerEvent.query.filter(LedgerEvent.sequence > after).order_by(
            LedgerEvent.sequence
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


def get_ledger():
    if "ledger" not in g:
        ledger = ElectionLedger.load()
        if ledger is None:
            raise ElectionNotInitialised()
        configured = current_app.config.get("ORGANISER_IDENTITY")
        if configured and configured != ledger.organiser:
            current_app.logger.warning(
                "ORGANISER_IDENTITY %s ignored; election organiser is %s",
                configured,
                ledger.organiser,
            )
        g.ledger = ledger
    return g.ledger
