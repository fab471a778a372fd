from dataclasses import dataclass
from urllib.parse import urlencode

import requests
from blinker import Namespace
from flask import current_app, session, url_for
from flask_login import UserMixin, login_user, logout_user
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import ExpiredSignatureError, JWTError, jwt

from ashenda.services.errors import AuthError

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

SESSION_KEY = "auth"
EXTENSION_KEY = "ashenda.auth"

_signals = Namespace()
auth_state_changed = _signals.signal("auth-state-changed")


class Voter(UserMixin):
    def __init__(self, id, email=None):
        self.id = id
        self.email = email

    def __repr__(self):
        return f"<Voter {self.id}>"


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    user: Voter
    expires_at: int = None


def _next_serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"])


def generate_next_token(next_url):
    return _next_serializer().dumps(next_url, salt="oauth-next")


def verify_next_token(token, max_age=1800):
    if not token:
        return None
    try:
        return _next_serializer().loads(token, salt="oauth-next", max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None


class AuthProvider:
    """Client for the hosted OAuth provider.

    Tokens are the provider's HS256 JWTs and are kept in the signed session
    cookie. State changes are broadcast on ``auth_state_changed``.
    """

    def decode_access_token(self, token):
        config = current_app.config
        return jwt.decode(
            token,
            config["AUTH_JWT_SECRET"],
            algorithms=["HS256"],
            audience=config["AUTH_JWT_AUDIENCE"],
        )

    def get_session(self):
        stored = session.get(SESSION_KEY)
        if not stored:
            return None

        try:
            claims = self.decode_access_token(stored["access_token"])
            return self._session_from(
                stored["access_token"], stored.get("refresh_token"), claims
            )
        except ExpiredSignatureError:
            return self.refresh_session(stored.get("refresh_token"))
        except (JWTError, KeyError, AuthError) as exc:
            current_app.logger.warning("Discarding unreadable session: %s", exc)
            session.pop(SESSION_KEY, None)
            return None

    def get_user(self):
        auth_session = self.get_session()
        return auth_session.user if auth_session else None

    def set_session(self, access_token, refresh_token):
        auth_session = self._store(access_token, refresh_token)
        login_user(auth_session.user)
        current_app.logger.info("User %s signed in", auth_session.user.id)
        self._emit(SIGNED_IN, auth_session)
        return auth_session

    def refresh_session(self, refresh_token):
        if not refresh_token:
            session.pop(SESSION_KEY, None)
            return None

        config = current_app.config
        try:
            response = requests.post(
                f"{config['AUTH_URL'].rstrip('/')}/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": refresh_token},
                headers={"apikey": config["AUTH_API_KEY"]},
                timeout=config["AUTH_TIMEOUT"],
            )
            response.raise_for_status()
            payload = response.json()
            auth_session = self._store(
                payload["access_token"], payload.get("refresh_token") or refresh_token
            )
        except (requests.RequestException, ValueError, KeyError, AuthError) as exc:
            current_app.logger.warning("Token refresh failed: %s", exc)
            session.pop(SESSION_KEY, None)
            return None

        self._emit(TOKEN_REFRESHED, auth_session)
        return auth_session

    def sign_in_with_oauth(self, redirect_to=None, next_url=None):
        config = current_app.config
        if not config["AUTH_URL"]:
            raise AuthError("Auth provider is not configured.")

        redirect_url = (
            redirect_to
            or config["OAUTH_REDIRECT_URL"]
            or url_for("auth_callback", _external=True)
        )
        if next_url:
            separator = "&" if "?" in redirect_url else "?"
            redirect_url = (
                f"{redirect_url}{separator}"
                f"{urlencode({'next': generate_next_token(next_url)})}"
            )

        params = {
            "provider": config["OAUTH_PROVIDER"],
            "redirect_to": redirect_url,
            "prompt": "select_account",
        }
        return f"{config['AUTH_URL'].rstrip('/')}/authorize?{urlencode(params)}"

    def sign_out(self):
        stored = session.pop(SESSION_KEY, None)
        logout_user()
        if stored:
            current_app.logger.info("User signed out")
        self._emit(SIGNED_OUT, None)

    def _store(self, access_token, refresh_token):
        try:
            claims = self.decode_access_token(access_token)
        except JWTError as exc:
            raise AuthError("Access token rejected.") from exc

        auth_session = self._session_from(access_token, refresh_token, claims)
        session[SESSION_KEY] = {
            "access_token": access_token,
            "refresh_token": refresh_token,
        }
        return auth_session

    def _session_from(self, access_token, refresh_token, claims):
        subject = claims.get("sub")
        if not subject:
            raise AuthError("Access token has no subject.")
        return AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            user=Voter(str(subject), claims.get("email")),
            expires_at=claims.get("exp"),
        )

    def _emit(self, event, auth_session):
        auth_state_changed.send(
            current_app._get_current_object(), event=event, auth_session=auth_session
        )


def init_app(app):
    app.extensions[EXTENSION_KEY] = AuthProvider()


def get_auth():
    return current_app.extensions[EXTENSION_KEY]
