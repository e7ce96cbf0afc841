"""Error types raised while bootstrapping and running the server."""


class MailHogError(Exception):
    """Base class for all MailHog server errors."""


class FatalConfigError(MailHogError):
    """Raised for misconfiguration the process cannot continue with."""


class BackendUnavailableError(MailHogError):
    """Raised when a remote storage backend cannot be reached."""


class StateIOError(MailHogError):
    """Raised when the persisted Jim state cannot be read or written."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
