def count_votes(votes):
    counts = {}
    for vote in votes:
        nominee_id = vote["nominee_id"]
        counts[nominee_id] = counts.get(nominee_id, 0) + 1
    return counts


def merge_vote_counts(nominees, votes):
    counts = count_votes(votes)
    return [dict(nominee, votes=counts.get(nominee["id"], 0)) for nominee in nominees]
