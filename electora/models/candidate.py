from electora.extensions import db


class Candidate(db.Model):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(200), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    symbol = db.Column(db.String(100), nullable=False)
    identity = db.Column(db.String(128), unique=True, nullable=False)
    vote_count = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "symbol": self.symbol,
            "identity": self.identity,
            "vote_count": self.vote_count,
        }
