from ashenda.services.views.leaderboard import rank_icon, top_nominees
from ashenda.services.views.pagination import paginate
from ashenda.services.views.search import normalize_query, search_nominees
from ashenda.services.views.tally import count_votes, merge_vote_counts

__all__ = [
    "count_votes",
    "merge_vote_counts",
    "normalize_query",
    "paginate",
    "rank_icon",
    "search_nominees",
    "top_nominees",
]
