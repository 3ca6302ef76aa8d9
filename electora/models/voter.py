from electora.extensions import db


class Voter(db.Model):
    __tablename__ = "voters"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(200), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    identity = db.Column(db.String(128), unique=True, nullable=False)
    voted_for = db.Column(
        db.String(128), db.ForeignKey("candidates.identity"), nullable=True
    )
    has_voted = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "identity": self.identity,
            "voted_for": self.voted_for,
            "has_voted": self.has_voted,
        }
