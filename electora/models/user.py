from flask_login import UserMixin

from electora.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    identity = db.Column(db.String(128), unique=True, nullable=False)
    # Only set by `flask election create-organiser`, never through signup.
    is_organiser = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "identity": self.identity,
            "is_organiser": self.is_organiser,
        }
