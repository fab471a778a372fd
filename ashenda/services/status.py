THANK_YOU = "Thank you for voting!"
ALREADY_VOTED = "You already voted!"
VOTE_FAILED = "Error voting. Please try again."
SIGN_IN_FAILED = "Sign in failed. Please try again."

# Outcome codes returned by the vote client.
VOTED = "voted"
DUPLICATE = "already_voted"
FAILED = "failed"
SIGN_IN_REQUIRED = "sign_in_required"
SIGN_IN_ERROR = "sign_in_failed"

MESSAGES = {
    VOTED: THANK_YOU,
    DUPLICATE: ALREADY_VOTED,
    FAILED: VOTE_FAILED,
    SIGN_IN_ERROR: SIGN_IN_FAILED,
}

CATEGORIES = {
    VOTED: "success",
    DUPLICATE: "info",
    FAILED: "error",
    SIGN_IN_ERROR: "error",
}
