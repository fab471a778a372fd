from ashenda.extensions import db


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Integer, primary_key=True)
    # One vote per identity across the whole contest, not per nominee.
    user_id = db.Column(db.String(64), unique=True, nullable=False)
    nominee_id = db.Column(db.Integer, db.ForeignKey("nominees.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
