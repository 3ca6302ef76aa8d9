from flask import jsonify, request
from flask_login import current_user, login_required

from electora.routes.forms import bad_request, clean_text, parse_age, read_payload
from electora.services.errors import Unauthorized, UnknownVoter
from electora.services.ledger import get_ledger
from electora.services.security import generate_voter_token
from electora.services.tally import recount_votes


def _caller_identity():
    # Registration is authorised by an organiser account bound from the CLI; an
    # account that merely carries the same identity string is not enough.
    if not current_user.is_organiser:
        return None
    return current_user.identity


def _require_organiser(ledger):
    if _caller_identity() != ledger.organiser:
        raise Unauthorized()


def register_admin_routes(app):
    @app.route("/admin/candidates", methods=["POST"])
    @login_required
    def register_candidate():
        data = read_payload(request)
        name = clean_text(data, "name")
        symbol = clean_text(data, "symbol")
        identity = clean_text(data, "identity")
        age = parse_age(data)

        if not name:
            return bad_request("Candidate name is required.")
        if age is None:
            return bad_request("Age must be a non-negative integer.")
        if not symbol:
            return bad_request("Candidate symbol is required.")
        if not identity:
            return bad_request("Candidate identity is required.")

        candidate = get_ledger().register_candidate(
            _caller_identity(), name, age, symbol, identity
        )
        return {"ok": True, "candidate": candidate.to_dict()}, 201

    @app.route("/admin/voters", methods=["POST"])
    @login_required
    def register_voter():
        data = read_payload(request)
        name = clean_text(data, "name")
        identity = clean_text(data, "identity")
        age = parse_age(data)

        if not name:
            return bad_request("Voter name is required.")
        if age is None:
            return bad_request("Age must be a non-negative integer.")
        if not identity:
            return bad_request("Voter identity is required.")

        voter = get_ledger().register_voter(_caller_identity(), name, age, identity)
        return {
            "ok": True,
            "voter": voter.to_dict(),
            "token": generate_voter_token(voter.identity),
        }, 201

    @app.route("/admin/voters")
    @login_required
    def list_voters():
        ledger = get_ledger()
        _require_organiser(ledger)
        return jsonify([voter.to_dict() for voter in ledger.list_voters()])

    @app.route("/admin/voters/<identity>/token")
    @login_required
    def voter_token(identity):
        ledger = get_ledger()
        _require_organiser(ledger)
        voter = ledger.get_voter(identity)
        if voter is None:
            raise UnknownVoter(identity=identity)
        return {
            "ok": True,
            "identity": voter.identity,
            "token": generate_voter_token(voter.identity),
        }

    @app.route("/admin/audit")
    @login_required
    def audit():
        ledger = get_ledger()
        _require_organiser(ledger)
        report = recount_votes(ledger.list_candidates(), ledger.list_voters())
        return jsonify(report)
