from blinker import Namespace
from flask import current_app

_signals = Namespace()

candidate_registered = _signals.signal("candidate-registered")
voter_registered = _signals.signal("voter-registered")
vote_cast = _signals.signal("vote-cast")
vote_changed = _signals.signal("vote-changed")


def _log_candidate_registered(sender, record, **extra):
    current_app.logger.debug("CandidateRegistered %s", record)


def _log_voter_registered(sender, record, **extra):
    current_app.logger.debug("VoterRegistered %s", record)


def _log_vote_cast(sender, voter, candidate, **extra):
    current_app.logger.debug("VoteCast voter=%s candidate=%s", voter, candidate)


def _log_vote_changed(sender, voter, new_candidate, **extra):
    current_app.logger.debug(
        "VoteChanged voter=%s new_candidate=%s", voter, new_candidate
    )


def register_event_logging(app):
    # Receivers are module-level, so repeated app creation does not stack them.
    candidate_registered.connect(_log_candidate_registered)
    voter_registered.connect(_log_voter_registered)
    vote_cast.connect(_log_vote_cast)
    vote_changed.connect(_log_vote_changed)
