from flask import current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from electora.extensions import db
from electora.models import User
from electora.routes.forms import bad_request, clean_text, read_payload
from electora.services.ledger import ElectionLedger


def _organiser_identities():
    reserved = {current_app.config.get("ORGANISER_IDENTITY")}
    ledger = ElectionLedger.load()
    if ledger is not None:
        reserved.add(ledger.organiser)
    reserved.discard(None)
    return reserved


def register_auth_routes(app):
    @app.route("/signup", methods=["POST"])
    def signup():
        data = read_payload(request)
        username = clean_text(data, "username")
        email = clean_text(data, "email").lower()
        password = data.get("password") or ""
        identity = clean_text(data, "identity")

        if not username or not email or not identity:
            return bad_request("Username, email and identity are required.")
        if len(password) < 8:
            return bad_request("Password must be at least 8 characters long.")
        if identity in _organiser_identities():
            current_app.logger.warning(
                "Signup %r refused: organiser identity %s", username, identity
            )
            return {"ok": False, "error": "This identity is reserved."}, 403

        new_user = User(
            username=username,
            email=email,
            identity=identity,
            password_hash=generate_password_hash(password, method="pbkdf2:sha256"),
        )

        try:
            db.session.add(new_user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {"ok": False, "error": "Username, email or identity already taken."}, 409

        current_app.logger.info(
            "Account %s created for identity %s", username, identity
        )
        return {"ok": True, "user": new_user.to_dict()}, 201

    @app.route("/check-username", methods=["POST"])
    def check_username():
        data = request.get_json(silent=True) or {}
        username = (data.get("username") or "").strip()
        user = User.query.filter_by(username=username).first()
        return jsonify({"exists": user is not None})

    @app.route("/login", methods=["POST"])
    def login():
        data = read_payload(request)
        username = clean_text(data, "username")
        password = data.get("password") or ""
        remember = bool(data.get("remember"))

        user = User.query.filter_by(username=username).first()
        if not user or not check_password_hash(user.password_hash, password):
            current_app.logger.warning("Failed login for %r", username)
            return {"ok": False, "error": "Invalid username or password."}, 401

        login_user(user, remember=remember)
        return {"ok": True, "user": user.to_dict()}

    @app.route("/me")
    @login_required
    def me():
        return {"ok": True, "user": current_user.to_dict()}

    @app.route("/logout")
    @login_required
    def logout():
        logout_user()
        return {"ok": True}
