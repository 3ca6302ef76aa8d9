from pathlib import Path
import sys
import os

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Safety default for any module-level app creation during test imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from electora import create_app
from electora.extensions import db
from electora.models import User
from electora.services.ledger import ElectionLedger

ORGANISER = "0xORGANISER"


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "SECRET_KEY": "test-secret",
            "ORGANISER_IDENTITY": ORGANISER,
            "ELECTION_TITLE": "Test Election",
        }
    )

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session


@pytest.fixture()
def ledger(db_session):
    return ElectionLedger.initialise(ORGANISER, "Test Election")


@pytest.fixture()
def organiser_user(db_session):
    user = User(
        username="organiser",
        email="organiser@example.com",
        password_hash="hashed-password",
        identity=ORGANISER,
        is_organiser=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def other_user(db_session):
    user = User(
        username="intruder",
        email="intruder@example.com",
        password_hash="hashed-password",
        identity="0xINTRUDER",
    )
    db_session.add(user)
    db_session.commit()
    return user


def _login(client, user):
    with client.session_transaction() as session:
        session["_user_id"] = str(user.id)
        session["_fresh"] = True
    return client


@pytest.fixture()
def auth_client(client, organiser_user, ledger):
    return _login(client, organiser_user)


@pytest.fixture()
def intruder_client(client, other_user, ledger):
    return _login(client, other_user)


@pytest.fixture()
def two_candidates(ledger):
    alice = ledger.register_candidate(ORGANISER, "Alice", 41, "Rose", "0xA")
    bob = ledger.register_candidate(ORGANISER, "Bob", 38, "Oak", "0xB")
    return alice, bob
