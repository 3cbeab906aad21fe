"""
Custom exceptions.

Every exception the core raises derives from GameError, so the API layer can catch a single type.
The `code` is the stable rejection signal handed to clients.
"""


class GameError(Exception):
    """Root of all errors raised by the matchmaking / chess core."""

    code: str = "game-error"


# --- VALIDATION ---
class InvalidRequestError(GameError):
    """Required fields missing or not interpretable."""

    code = "missing-fields"


class InvalidSquareError(InvalidRequestError):
    """Text that cannot be read as a square in algebraic notation ('a1' - 'h8')."""

    code = "invalid-square"


class InitDataError(GameError):
    """Telegram WebApp initData signature did not check out."""

    code = "bad-init-data"


class WebhookSecretError(InitDataError):
    """Telegram webhook call without the configured secret token."""

    code = "bad-webhook-secret"


# --- AUTHORIZATION ---
class NotAParticipantError(GameError):
    """Caller is seated at neither color of the session."""

    code = "not-a-participant"


# --- RULE VIOLATIONS ---
class OutOfTurnError(GameError):
    code = "out-of-turn"


class GameAlreadyOverError(GameError):
    code = "game-already-over"


class IllegalMoveError(GameError):
    code = "illegal-move"


# --- LOOKUPS ---
class RepositoryError(GameError):
    code = "repository-error"


class SessionNotFoundError(RepositoryError):
    code = "not-found"
