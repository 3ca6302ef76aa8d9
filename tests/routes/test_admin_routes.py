from werkzeug.security import generate_password_hash

from electora.models import User
from electora.services.security import verify_voter_token


def test_register_candidate_route(auth_client):
    response = auth_client.post(
        "/admin/candidates",
        json={"name": "Alice", "age": "41", "symbol": "Rose", "identity": "0xA"},
    )

    assert response.status_code == 201
    assert response.get_json()["candidate"] == {
        "id": 1,
        "name": "Alice",
        "age": 41,
        "symbol": "Rose",
        "identity": "0xA",
        "vote_count": 0,
    }


def test_register_candidate_validation(auth_client):
    missing_name = auth_client.post(
        "/admin/candidates", json={"age": 41, "symbol": "Rose", "identity": "0xA"}
    )
    bad_age = auth_client.post(
        "/admin/candidates",
        json={"name": "Alice", "age": "forty", "symbol": "Rose", "identity": "0xA"},
    )
    negative_age = auth_client.post(
        "/admin/candidates",
        json={"name": "Alice", "age": -1, "symbol": "Rose", "identity": "0xA"},
    )

    assert missing_name.status_code == 400
    assert bad_age.status_code == 400
    assert negative_age.status_code == 400


def test_duplicate_candidate_route_returns_conflict(auth_client):
    payload = {"name": "Alice", "age": 41, "symbol": "Rose", "identity": "0xA"}
    auth_client.post("/admin/candidates", json=payload)

    response = auth_client.post("/admin/candidates", json={**payload, "name": "Other"})

    assert response.status_code == 409
    body = response.get_json()
    assert body["error"] == "ALREADY_REGISTERED"
    assert body["identity"] == "0xA"


def test_non_organiser_cannot_register(intruder_client, ledger):
    candidate = intruder_client.post(
        "/admin/candidates",
        json={"name": "Mallory", "age": 30, "symbol": "Skull", "identity": "0xM"},
    )
    voter = intruder_client.post(
        "/admin/voters", json={"name": "Mallory", "age": 30, "identity": "0xM"}
    )

    assert candidate.status_code == 403
    assert candidate.get_json()["error"] == "UNAUTHORIZED"
    assert voter.status_code == 403
    assert intruder_client.get("/admin/voters").status_code == 403
    assert intruder_client.get("/admin/audit").status_code == 403
    assert ledger.list_candidates() == []


def test_register_voter_returns_signed_token(auth_client, app):
    response = auth_client.post(
        "/admin/voters", data={"name": "Vera", "age": "29", "identity": "0xV"}
    )

    assert response.status_code == 201
    body = response.get_json()
    assert body["voter"]["id"] == 1
    assert body["voter"]["has_voted"] is False
    assert verify_voter_token(body["token"]) == "0xV"


def test_list_voters_and_reissue_token(auth_client):
    auth_client.post("/admin/voters", json={"name": "Vera", "age": 29, "identity": "0xV1"})
    auth_client.post("/admin/voters", json={"name": "Walt", "age": 33, "identity": "0xV2"})

    voters = auth_client.get("/admin/voters").get_json()
    assert [voter["identity"] for voter in voters] == ["0xV1", "0xV2"]

    token = auth_client.get("/admin/voters/0xV2/token").get_json()["token"]
    assert verify_voter_token(token) == "0xV2"

    missing = auth_client.get("/admin/voters/0xNOPE/token")
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "UNKNOWN_VOTER"


def test_audit_route(auth_client, ledger, two_candidates):
    ledger.register_voter("0xORGANISER", "Vera", 29, "0xV")
    ledger.cast_vote("0xV", "0xA")

    report = auth_client.get("/admin/audit").get_json()

    assert report["ok"] is True
    assert report["recorded_total"] == 1


def test_signup_cannot_claim_the_organiser_identity(client, ledger):
    signup = client.post(
        "/signup",
        json={
            "username": "mallory",
            "email": "mallory@example.com",
            "password": "long-enough",
            "identity": "0xORGANISER",
        },
    )

    assert signup.status_code == 403
    assert User.query.filter_by(username="mallory").count() == 0


def test_account_with_organiser_identity_but_not_bound_gets_403(client, db_session, ledger):
    impostor = User(
        username="mallory",
        email="mallory@example.com",
        password_hash=generate_password_hash("long-enough", method="pbkdf2:sha256"),
        identity="0xORGANISER",
    )
    db_session.add(impostor)
    db_session.commit()

    login = client.post("/login", json={"username": "mallory", "password": "long-enough"})
    assert login.status_code == 200

    response = client.post(
        "/admin/candidates",
        json={"name": "Mallory", "age": 30, "symbol": "Skull", "identity": "0xM"},
    )

    assert response.status_code == 403
    assert response.get_json()["error"] == "UNAUTHORIZED"
    assert ledger.list_candidates() == []
