"""Error taxonomy shared by the server and the client."""


class SnipvaultError(Exception):
    """Base class for all snipvault errors."""


class SnippetNotFoundError(SnipvaultError):
    """The snippet does not exist or is not visible to the requesting scope."""

    def __init__(self, snippet_id, message: str = "Snippet not found"):
        super().__init__(message)
        self.snippet_id = snippet_id


class InvalidStateError(SnipvaultError):
    """The snippet exists but is in the wrong lifecycle state for the operation."""

    def __init__(self, snippet_id, message: str):
        super().__init__(message)
        self.snippet_id = snippet_id


class AuthenticationError(SnipvaultError):
    """Credentials were rejected; the caller's session must be reset."""


class TransientError(SnipvaultError):
    """Network or server failure on an authoritative call."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
