from flask import current_app, flash, redirect, request, url_for
from flask_login import login_required

from ashenda.services.auth import get_auth, verify_next_token
from ashenda.services.errors import AuthError
from ashenda.services.status import SIGN_IN_FAILED


def _safe_next(target):
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("index")


def register_auth_routes(app):
    @app.route("/login")
    def login():
        next_url = _safe_next(request.args.get("next"))
        try:
            return redirect(get_auth().sign_in_with_oauth(next_url=next_url))
        except AuthError as exc:
            current_app.logger.warning("Sign-in could not start: %s", exc)
            flash(SIGN_IN_FAILED, "error")
            return redirect(next_url)

    @app.route("/auth/callback")
    def auth_callback():
        destination = _safe_next(verify_next_token(request.args.get("next")))
        access_token = request.args.get("access_token")
        refresh_token = request.args.get("refresh_token")

        if access_token and refresh_token:
            try:
                get_auth().set_session(access_token, refresh_token)
            except AuthError as exc:
                current_app.logger.warning("OAuth handback rejected: %s", exc)
                flash(SIGN_IN_FAILED, "error")
        elif request.args.get("error"):
            current_app.logger.warning(
                "OAuth provider returned error: %s", request.args.get("error")
            )
            flash(SIGN_IN_FAILED, "error")

        # Redirecting drops the tokens from the visible URL.
        return redirect(destination)

    @app.route("/logout")
    @login_required
    def logout():
        get_auth().sign_out()
        return redirect(url_for("index"))
