# Error code the store reports for a unique-constraint violation.
UNIQUE_VIOLATION = "23505"


class ContestError(Exception):
    message = "Contest error"

    def __init__(self, message=None, code=None):
        self.message = message or self.message
        self.code = code
        super().__init__(self.message)

    def __str__(self):
        return self.message


class StoreError(ContestError):
    message = "Store request failed"


class VoteConflictError(StoreError):
    message = "Vote already exists"

    def __init__(self, message=None, code=UNIQUE_VIOLATION):
        super().__init__(message, code)


class AuthError(ContestError):
    message = "Authentication failed"
