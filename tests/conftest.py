from pathlib import Path
import sys
import time

import pytest
from jose import jwt

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from ashenda import create_app
from ashenda.extensions import db
from ashenda.models import Nominee, Vote

JWT_SECRET = "test-jwt-secret"
AUTH_URL = "https://auth.example.test/auth/v1"


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key",
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "AUTH_URL": AUTH_URL,
            "AUTH_API_KEY": "anon-key",
            "AUTH_JWT_SECRET": JWT_SECRET,
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
def request_ctx(app):
    with app.test_request_context("/"):
        yield


@pytest.fixture()
def make_token():
    def _make_token(user_id, expires_in=3600, email=None):
        claims = {
            "sub": user_id,
            "aud": "authenticated",
            "exp": int(time.time()) + expires_in,
        }
        if email:
            claims["email"] = email
        return jwt.encode(claims, JWT_SECRET, algorithm="HS256")

    return _make_token


@pytest.fixture()
def nominees(db_session):
    abel = Nominee(name="Abel", city="Mekelle", photo_url="https://img.example.test/abel.jpg")
    sara = Nominee(name="Sara", city="Adigrat")
    db_session.add_all([abel, sara])
    db_session.flush()

    db_session.add_all(
        [Vote(user_id=f"seed-abel-{n}", nominee_id=abel.id) for n in range(2)]
        + [Vote(user_id=f"seed-sara-{n}", nominee_id=sara.id) for n in range(5)]
    )
    db_session.commit()
    return [abel, sara]


@pytest.fixture()
def signed_in_client(client, make_token):
    def _sign_in(user_id):
        response = client.get(
            "/auth/callback",
            query_string={
                "access_token": make_token(user_id),
                "refresh_token": f"refresh-{user_id}",
            },
        )
        assert response.status_code == 302
        return client

    return _sign_in
