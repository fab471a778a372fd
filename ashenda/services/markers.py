class VoteMarkers:
    """Per-browser "already voted" flags.

    The flags live in the browser's session cookie, so they are a hint for
    rendering and an early short-circuit only. The store decides.
    """

    def __init__(self, storage, prefix="ashenda_voted_"):
        self.storage = storage
        self.prefix = prefix

    def key(self, user_id):
        return f"{self.prefix}{user_id}"

    def has(self, user_id):
        if not user_id:
            return False
        return bool(self.storage.get(self.key(user_id)))

    def mark(self, user_id):
        if user_id:
            self.storage[self.key(user_id)] = True

    def clear(self, user_id):
        if user_id:
            self.storage.pop(self.key(user_id), None)
