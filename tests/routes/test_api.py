from urllib.parse import urlparse

from ashenda.models import Nominee, Vote


def test_nominee_search_scenario(client, nominees):
    payload = client.get("/api/nominees?q=sa").get_json()

    assert [n["name"] for n in payload["nominees"]] == ["Sara"]
    assert payload["total_pages"] == 1
    assert payload["page"] == 1
    assert payload["query"] == "sa"
    assert payload["has_voted"] is False


def test_nominee_listing_paginates_and_clamps(client, db_session):
    db_session.add_all([Nominee(name=f"Nominee {n:02d}") for n in range(25)])
    db_session.commit()

    payload = client.get("/api/nominees?page=3").get_json()
    assert payload["total_pages"] == 3
    assert [n["name"] for n in payload["nominees"]] == [
        f"Nominee {n:02d}" for n in range(20, 25)
    ]

    assert client.get("/api/nominees?page=40").get_json()["page"] == 3
    assert client.get("/api/nominees?page=40&q=zzz").get_json()["page"] == 1


def test_leaderboard_orders_by_votes(client, nominees):
    rows = client.get("/api/leaderboard").get_json()["leaderboard"]

    assert [row["nominee"]["name"] for row in rows] == ["Sara", "Abel"]
    assert [row["rank"] for row in rows] == [1, 2]


def test_unauthenticated_api_vote_asks_for_sign_in(client, nominees):
    payload = client.post(f"/api/vote/{nominees[0].id}", json={"q": "abel"}).get_json()

    assert payload["ok"] is False
    assert payload["status"] == "sign_in_required"
    assert urlparse(payload["redirect"]).netloc == "auth.example.test"
    assert Vote.query.count() == 7


def test_api_vote_then_duplicate(signed_in_client, nominees):
    client = signed_in_client("user-2")

    first = client.post(f"/api/vote/{nominees[1].id}").get_json()
    second = client.post(f"/api/vote/{nominees[0].id}").get_json()

    assert first == {
        "ok": True,
        "status": "voted",
        "message": "Thank you for voting!",
        "redirect": None,
    }
    assert second["status"] == "already_voted"
    assert second["message"] == "You already voted!"

    listing = client.get("/api/nominees").get_json()
    assert listing["has_voted"] is True
    assert [n["votes"] for n in listing["nominees"]] == [2, 6]


def test_countdown_falls_back_when_unset(client):
    payload = client.get("/api/countdown").get_json()

    assert payload["finished"] is False
    assert set(payload) == {"days", "hours", "minutes", "seconds", "finished", "target"}
    assert int(payload["days"]) >= 28
