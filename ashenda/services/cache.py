import threading
import time


class NomineeCache:
    """Process-wide cache of merged nominee rows.

    Fetches are sequenced with a generation counter: ``begin_fetch`` hands
    out a generation and ``apply`` only accepts the result of the latest one,
    so a slow response can never overwrite newer data. Memoized search
    results are tied to a revision that changes whenever the rows do.
    """

    def __init__(self, ttl=30.0, search_ttl=30.0, clock=time.monotonic):
        self.ttl = ttl
        self.search_ttl = search_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._generation = 0
        self._revision = 0
        self._nominees = None
        self._expires_at = 0.0
        self._searches = {}

    def get(self):
        with self._lock:
            if self._nominees is None or self._clock() >= self._expires_at:
                return None
            return list(self._nominees)

    def peek(self):
        with self._lock:
            if self._nominees is None:
                return None
            return list(self._nominees)

    def begin_fetch(self):
        with self._lock:
            self._generation += 1
            return self._generation

    def apply(self, generation, nominees):
        with self._lock:
            if generation != self._generation:
                return False
            self._nominees = list(nominees)
            self._expires_at = self._clock() + self.ttl
            self._touch()
            return True

    def record_vote(self, nominee_id, refresh_after):
        """Bump one tally in place and expire the rows ``refresh_after`` seconds from now."""
        with self._lock:
            # Fetches started before this vote can no longer be applied.
            self._generation += 1
            if self._nominees is None:
                return False
            for index, nominee in enumerate(self._nominees):
                if nominee["id"] == nominee_id:
                    votes = (nominee.get("votes") or 0) + 1
                    self._nominees[index] = dict(nominee, votes=votes)
                    break
            else:
                return False
            self._expires_at = min(self._expires_at, self._clock() + refresh_after)
            self._touch()
            return True

    def search(self, query, compute):
        with self._lock:
            hit = self._searches.get(query)
            if hit is not None and hit[0] > self._clock():
                return list(hit[1])
            revision = self._revision

        results = compute()

        with self._lock:
            if revision == self._revision:
                self._searches[query] = (self._clock() + self.search_ttl, list(results))
        return results

    def _touch(self):
        self._revision += 1
        self._searches.clear()
