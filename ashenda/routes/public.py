from datetime import datetime, timezone

from flask import flash, redirect, render_template, request, url_for
from flask_login import login_required

from ashenda.services.client import current_countdown, get_vote_client
from ashenda.services.errors import StoreError
from ashenda.services.store import ContestStore


def load_contest_view():
    client = get_vote_client()
    client.resolve_identity()
    client.load_nominees()
    client.search(request.args.get("q", ""))
    client.set_page(request.args.get("page", 1, type=int))
    return client


def register_public_routes(app):
    @app.context_processor
    def inject_contest_settings():
        return {
            "current_year": datetime.now(timezone.utc).year,
            "placeholder_photo": app.config["PLACEHOLDER_PHOTO"],
            "status_message_ms": app.config["STATUS_MESSAGE_MS"],
            "search_debounce_ms": app.config["SEARCH_DEBOUNCE_MS"],
            "nominee_retry_ms": int(app.config["NOMINEE_RETRY_DELAY"] * 1000),
        }

    @app.route("/")
    def index():
        client = load_contest_view()
        return render_template(
            "index.html",
            page=client.page(),
            query=client.state.query,
            user=client.state.user,
            has_voted=client.has_voted(),
            leaderboard=client.leaderboard(),
            countdown=current_countdown(),
        )

    @app.route("/fragments/nominees")
    def nominee_grid():
        client = load_contest_view()
        return render_template(
            "_nominee_grid.html",
            page=client.page(),
            query=client.state.query,
            user=client.state.user,
            has_voted=client.has_voted(),
        )

    @app.route("/vote/<int:nominee_id>", methods=["POST"])
    def vote(nominee_id):
        back = url_for(
            "index",
            q=request.form.get("q") or None,
            page=request.form.get("page", type=int),
        )
        outcome = get_vote_client().cast_vote(nominee_id, next_url=back)
        if outcome.redirect:
            return redirect(outcome.redirect)

        flash(outcome.message, outcome.category)
        return redirect(back)

    @app.route("/votes/reset-marker", methods=["POST"])
    @login_required
    def reset_vote_marker():
        client = get_vote_client()
        client.resolve_identity()
        client.reset_marker()
        return redirect(url_for("index"))

    @app.route("/healthz")
    def healthz():
        try:
            ContestStore().ping()
        except StoreError:
            return {"ok": False}, 503
        return {"ok": True}
