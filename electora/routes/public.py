from flask import jsonify, request, session

from electora.routes.forms import bad_request, clean_text, read_payload
from electora.services.ledger import get_ledger
from electora.services.security import verify_voter_token
from electora.services.tally import serialize_tally, tally_election


def _session_voter():
    identity = session.get("voter_identity")
    if not identity:
        return None
    return get_ledger().get_voter(identity)


def _voter_required():
    return {"ok": False, "error": "Join with your voter token first."}, 401


def register_public_routes(app):
    @app.route("/")
    def index():
        election = get_ledger().election
        return {"ok": True, "election": election.to_dict()}

    @app.route("/candidates")
    def list_candidates():
        candidates = get_ledger().list_candidates()
        return jsonify([candidate.to_dict() for candidate in candidates])

    @app.route("/join", methods=["POST"])
    def join():
        data = read_payload(request)
        token = clean_text(data, "token")
        if not token:
            return bad_request("Please provide a voter token.")

        identity = verify_voter_token(token)
        voter = get_ledger().get_voter(identity) if identity else None
        if voter is None:
            return {"ok": False, "error": "Invalid voter token."}, 401

        session["voter_identity"] = voter.identity
        session["voter_name"] = voter.name
        return {"ok": True, "voter": voter.to_dict()}

    @app.route("/voter-logout")
    def voter_logout():
        session.pop("voter_identity", None)
        session.pop("voter_name", None)
        return {"ok": True}

    @app.route("/vote", methods=["GET", "POST"])
    def vote():
        voter = _session_voter()
        if voter is None:
            return _voter_required()

        if request.method == "GET":
            return {"ok": True, "voter": voter.to_dict()}

        candidate = clean_text(read_payload(request), "candidate")
        if not candidate:
            return bad_request("Please choose a candidate.")

        ledger = get_ledger()
        ledger.cast_vote(voter.identity, candidate)
        return {"ok": True, "voter": ledger.get_voter(voter.identity).to_dict()}

    @app.route("/vote/change", methods=["POST"])
    def change_vote():
        voter = _session_voter()
        if voter is None:
            return _voter_required()

        candidate = clean_text(read_payload(request), "candidate")
        if not candidate:
            return bad_request("Please choose a candidate.")

        ledger = get_ledger()
        ledger.change_vote(voter.identity, candidate)
        return {"ok": True, "voter": ledger.get_voter(voter.identity).to_dict()}

    @app.route("/results")
    def results():
        ledger = get_ledger()
        result = tally_election(ledger.list_candidates())
        return jsonify(serialize_tally(result))

    @app.route("/votes")
    def votes():
        ledger = get_ledger()
        candidates = {
            candidate.identity: candidate for candidate in ledger.list_candidates()
        }
        voters = ledger.list_voters()

        rows = []
        for voter in voters:
            if not voter.has_voted:
                continue
            candidate = candidates.get(voter.voted_for)
            rows.append(
                {
                    "voter": voter.identity,
                    "voter_name": voter.name,
                    "candidate": voter.voted_for,
                    "candidate_name": candidate.name if candidate else None,
                }
            )
        rows.sort(key=lambda row: row["voter_name"].lower())

        return jsonify(
            {
                "rows": rows,
                "num_voters_voted": len(rows),
                "num_possible_voters": len(voters),
            }
        )

    @app.route("/events")
    def events():
        after = request.args.get("after", 0, type=int)
        limit = request.args.get("limit", type=int)
        if limit is not None and limit < 1:
            return bad_request("Limit must be a positive integer.")
        events = get_ledger().events(after=after, limit=limit)
        return jsonify([event.to_dict() for event in events])
