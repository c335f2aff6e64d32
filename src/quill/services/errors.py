"""Domain exceptions raised by the service layer.

Routers translate these into HTTP status codes; services never raise
HTTPException themselves.
"""


class NotFoundError(Exception):
    """A directly addressed row doesn't exist (→ 404)."""


class ArticleNotFoundError(NotFoundError):
    pass


class TagNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class CredentialNotFoundError(NotFoundError):
    pass


class DuplicateError(Exception):
    """A unique column (username, email, tag name) already holds the value (→ 409)."""


class InvalidStatusError(ValueError):
    """Requested article status transition isn't allowed (→ 400)."""


class AuthError(Exception):
    """Token or session rejected (→ 401). The message is for logs only."""


class InvalidCredentialsError(AuthError):
    """Username/password pair didn't check out."""
