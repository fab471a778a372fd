from flask import request, url_for

from ashenda.routes.public import load_contest_view
from ashenda.services.client import current_countdown, get_vote_client


def register_api_routes(app):
    @app.route("/api/nominees")
    def api_nominees():
        client = load_contest_view()
        page = client.page()
        return {
            "nominees": page["items"],
            "page": page["page"],
            "total_pages": page["total_pages"],
            "total": page["total"],
            "query": client.state.query,
            "has_voted": client.has_voted(),
        }

    @app.route("/api/leaderboard")
    def api_leaderboard():
        client = get_vote_client()
        client.load_nominees()
        return {"leaderboard": client.leaderboard()}

    @app.route("/api/countdown")
    def api_countdown():
        return current_countdown()

    @app.route("/api/vote/<int:nominee_id>", methods=["POST"])
    def api_vote(nominee_id):
        payload = request.get_json(silent=True) or {}
        back = url_for(
            "index", q=payload.get("q") or None, page=payload.get("page") or None
        )
        outcome = get_vote_client().cast_vote(nominee_id, next_url=back)
        return outcome.as_dict()
