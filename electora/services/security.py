from flask import current_app
from itsdangerous import BadSignature, URLSafeSerializer


def _voter_serializer():
    return URLSafeSerializer(
        current_app.config["SECRET_KEY"], salt=current_app.config["VOTER_TOKEN_SALT"]
    )


def generate_voter_token(identity):
    return _voter_serializer().dumps({"identity": identity})


def verify_voter_token(token):
    try:
        data = _voter_serializer().loads(token)
    except BadSignature:
        return None
    if not isinstance(data, dict):
        return None
    return data.get("identity")
