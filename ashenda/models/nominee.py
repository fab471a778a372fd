from ashenda.extensions import db


class Nominee(db.Model):
    __tablename__ = "nominees"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    city = db.Column(db.String(120), nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)
    facebook_url = db.Column(db.String(500), nullable=True)

    ballots = db.relationship("Vote", backref="nominee", lazy=True)
