from dataclasses import dataclass, field

from flask import current_app, g, session

from ashenda.services import status
from ashenda.services.auth import (
    SIGNED_IN,
    SIGNED_OUT,
    TOKEN_REFRESHED,
    auth_state_changed,
    get_auth,
)
from ashenda.services.cache import NomineeCache
from ashenda.services.countdown import countdown_parts, resolve_countdown_target
from ashenda.services.errors import AuthError, StoreError, VoteConflictError
from ashenda.services.markers import VoteMarkers
from ashenda.services.store import ContestStore
from ashenda.services.views import (
    merge_vote_counts,
    normalize_query,
    paginate,
    search_nominees,
    top_nominees,
)

EXTENSION_KEY = "ashenda.contest"


@dataclass
class ClientState:
    nominees: list = field(default_factory=list)
    filtered: list = field(default_factory=list)
    query: str = ""
    current_page: int = 1
    user: object = None
    user_votes: set = field(default_factory=set)


@dataclass
class VoteOutcome:
    status: str
    redirect: str = None

    @property
    def ok(self):
        return self.status == status.VOTED

    @property
    def message(self):
        return status.MESSAGES.get(self.status)

    @property
    def category(self):
        return status.CATEGORIES.get(self.status, "info")

    def as_dict(self):
        return {
            "ok": self.ok,
            "status": self.status,
            "message": self.message,
            "redirect": self.redirect,
        }


class VoteClient:
    """Keeps one browser session's view of the contest in sync with the store.

    The only write is a vote. Guards run in order: an identity must resolve,
    the store must not already hold a vote for it, and the browser must not
    carry a vote marker for it. The store's unique constraint has the final
    word, so a conflict on insert is reported exactly like a guard trip.
    """

    def __init__(
        self,
        store,
        auth,
        markers,
        cache,
        per_page=10,
        search_fields=("name", "city"),
        leaderboard_size=5,
        refresh_delay=1.0,
    ):
        self.store = store
        self.auth = auth
        self.markers = markers
        self.cache = cache
        self.per_page = per_page
        self.search_fields = tuple(search_fields)
        self.leaderboard_size = leaderboard_size
        self.refresh_delay = refresh_delay
        self.state = ClientState()
        self._rows_cached = False

    # -- nominees -------------------------------------------------------

    def load_nominees(self, force=False):
        nominees = None if force else self.cache.get()
        if nominees is None:
            nominees, self._rows_cached = self._fetch_nominees()
        else:
            self._rows_cached = True
        self.state.nominees = nominees
        self.state.filtered = self._filter(self.state.query)
        return nominees

    def _fetch_nominees(self):
        generation = self.cache.begin_fetch()
        try:
            rows = self.store.select_nominees()
        except StoreError as exc:
            current_app.logger.warning("Nominee list unavailable: %s", exc)
            return [], False

        complete = True
        try:
            votes = self.store.select_votes()
        except StoreError as exc:
            current_app.logger.warning("Vote counts unavailable: %s", exc)
            votes = []
            complete = False

        nominees = merge_vote_counts(rows, votes)
        if not complete:
            return nominees, False
        if not self.cache.apply(generation, nominees):
            current_app.logger.info("Dropping superseded nominee fetch %s", generation)
            newer = self.cache.peek()
            if newer is None:
                return nominees, False
            return newer, True
        current_app.logger.info("Loaded %s nominees", len(nominees))
        return nominees, True

    def search(self, query):
        self.state.query = normalize_query(query)
        self.state.filtered = self._filter(self.state.query)
        self.state.current_page = 1
        return self.state.filtered

    def _filter(self, query):
        if not query:
            return list(self.state.nominees)
        nominees = self.state.nominees
        if not self._rows_cached:
            # Degraded rows must not read or seed the shared memo.
            return search_nominees(nominees, query, self.search_fields)
        return self.cache.search(
            query, lambda: search_nominees(nominees, query, self.search_fields)
        )

    def set_page(self, page):
        self.state.current_page = page
        return self.page()

    def page(self):
        view = paginate(self.state.filtered, self.state.current_page, self.per_page)
        self.state.current_page = view["page"]
        return view

    def leaderboard(self):
        return top_nominees(self.state.nominees, self.leaderboard_size)

    # -- identity -------------------------------------------------------

    def resolve_identity(self):
        auth_session = self.auth.get_session()
        if auth_session is None:
            self.clear_identity()
            return None
        self.load_user_votes(auth_session.user)
        return self.state.user

    def load_user_votes(self, user):
        self.state.user = user
        try:
            votes = self.store.select_votes(user_id=user.id)
        except StoreError as exc:
            current_app.logger.warning("Votes for %s unavailable: %s", user.id, exc)
            self.state.user_votes = set()
            return self.state.user_votes

        self.state.user_votes = {vote["nominee_id"] for vote in votes}
        if self.state.user_votes:
            self.markers.mark(user.id)
        else:
            self.markers.clear(user.id)
        return self.state.user_votes

    def clear_identity(self):
        self.state.user = None
        self.state.user_votes = set()

    def has_voted(self):
        user = self.state.user
        if user is None:
            return False
        return bool(self.state.user_votes) or self.markers.has(user.id)

    # -- voting ---------------------------------------------------------

    def cast_vote(self, nominee_id, next_url=None):
        if self.resolve_identity() is None:
            return self._request_sign_in(next_url)

        if self.state.user_votes:
            return VoteOutcome(status.DUPLICATE)

        user_id = self.state.user.id
        if self.markers.has(user_id):
            return VoteOutcome(status.DUPLICATE)

        try:
            self.store.insert_vote(user_id, nominee_id)
        except VoteConflictError:
            return VoteOutcome(status.DUPLICATE)
        except StoreError as exc:
            current_app.logger.warning("Vote by %s failed: %s", user_id, exc)
            return VoteOutcome(status.FAILED)

        current_app.logger.info("User %s voted for nominee %s", user_id, nominee_id)
        self.markers.mark(user_id)
        self.state.user_votes.add(nominee_id)
        self._record_vote(nominee_id)
        return VoteOutcome(status.VOTED)

    def _request_sign_in(self, next_url):
        try:
            url = self.auth.sign_in_with_oauth(next_url=next_url)
        except AuthError as exc:
            current_app.logger.warning("Sign-in could not start: %s", exc)
            return VoteOutcome(status.SIGN_IN_ERROR)
        return VoteOutcome(status.SIGN_IN_REQUIRED, redirect=url)

    def _record_vote(self, nominee_id):
        self.state.nominees = [
            dict(nominee, votes=(nominee.get("votes") or 0) + 1)
            if nominee["id"] == nominee_id
            else nominee
            for nominee in self.state.nominees
        ]
        recorded = self.cache.record_vote(nominee_id, self.refresh_delay)
        self._rows_cached = self._rows_cached and recorded
        self.state.filtered = self._filter(self.state.query)

    def reset_marker(self):
        if self.state.user is not None:
            self.markers.clear(self.state.user.id)


@auth_state_changed.connect
def _on_auth_state_change(sender, event=None, auth_session=None, **extra):
    vote_client = g.get("vote_client")
    if vote_client is None:
        return
    if event in (SIGNED_IN, TOKEN_REFRESHED) and auth_session is not None:
        vote_client.load_user_votes(auth_session.user)
    elif event == SIGNED_OUT:
        vote_client.clear_identity()


def init_app(app):
    config = app.config
    app.extensions[EXTENSION_KEY] = {
        "nominees": NomineeCache(
            ttl=config["NOMINEE_CACHE_TTL"], search_ttl=config["SEARCH_CACHE_TTL"]
        ),
        "countdown_target": None,
    }

    @app.teardown_request
    def _drop_vote_client(exc):
        g.pop("vote_client", None)


def get_vote_client():
    if "vote_client" not in g:
        config = current_app.config
        g.vote_client = VoteClient(
            store=ContestStore(),
            auth=get_auth(),
            markers=VoteMarkers(session, config["VOTE_MARKER_PREFIX"]),
            cache=current_app.extensions[EXTENSION_KEY]["nominees"],
            per_page=config["NOMINEES_PER_PAGE"],
            search_fields=config["SEARCH_FIELDS"],
            leaderboard_size=config["LEADERBOARD_SIZE"],
            refresh_delay=config["VOTE_REFRESH_DELAY"],
        )
    return g.vote_client


def get_countdown_target():
    contest = current_app.extensions[EXTENSION_KEY]
    if contest["countdown_target"] is None:
        config = current_app.config
        contest["countdown_target"] = resolve_countdown_target(
            ContestStore(),
            policy=config["COUNTDOWN_POLICY"],
            key=config["COUNTDOWN_SETTING_KEY"],
            fallback=config["COUNTDOWN_FALLBACK"],
        )
    return contest["countdown_target"]


def current_countdown(now=None):
    target = get_countdown_target()
    parts = countdown_parts(target, now)
    parts["target"] = target.isoformat()
    return parts
