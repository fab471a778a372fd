from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ashenda.extensions import db
from ashenda.models import Nominee, Setting, Vote
from ashenda.services.errors import StoreError, VoteConflictError


def nominee_row(nominee):
    return {
        "id": nominee.id,
        "name": nominee.name,
        "city": nominee.city,
        "photo_url": nominee.photo_url,
        "facebook_url": nominee.facebook_url,
    }


def vote_row(vote):
    return {"user_id": vote.user_id, "nominee_id": vote.nominee_id}


class ContestStore:
    """Relational store holding nominees, votes and settings.

    Reads hand back plain dicts. Every failure surfaces as ``StoreError`` so
    callers can degrade instead of crashing; a duplicate vote surfaces as
    ``VoteConflictError`` carrying the unique-violation code.
    """

    def _failed(self, action, exc):
        db.session.rollback()
        current_app.logger.warning("Store %s failed: %s", action, exc)
        return StoreError(f"Could not {action}.")

    def select_nominees(self):
        try:
            nominees = Nominee.query.order_by(Nominee.id).all()
        except SQLAlchemyError as exc:
            raise self._failed("select nominees", exc) from exc
        return [nominee_row(nominee) for nominee in nominees]

    def select_votes(self, user_id=None):
        query = Vote.query
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        try:
            votes = query.order_by(Vote.id).all()
        except SQLAlchemyError as exc:
            raise self._failed("select votes", exc) from exc
        return [vote_row(vote) for vote in votes]

    def insert_vote(self, user_id, nominee_id):
        try:
            nominee = db.session.get(Nominee, nominee_id)
        except SQLAlchemyError as exc:
            raise self._failed("look up nominee", exc) from exc
        if nominee is None:
            raise StoreError(f"Unknown nominee {nominee_id}.")

        vote = Vote(user_id=user_id, nominee_id=nominee_id)
        try:
            db.session.add(vote)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            current_app.logger.info("Duplicate vote rejected for user %s", user_id)
            raise VoteConflictError() from exc
        except SQLAlchemyError as exc:
            raise self._failed("insert vote", exc) from exc
        return vote_row(vote)

    def select_setting(self, key=None):
        query = Setting.query
        if key is not None:
            query = query.filter_by(key=key)
        try:
            setting = query.order_by(Setting.id).first()
        except SQLAlchemyError as exc:
            raise self._failed("select setting", exc) from exc
        return setting.value if setting else None

    def ping(self):
        try:
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise self._failed("reach the database", exc) from exc
        return True
