"""Exceptions raised by the order console."""


class OpsConsoleError(Exception):
    """Base exception for all console errors."""

    pass


class TransportError(OpsConsoleError):
    """Raised when a request to the order backend never completed.

    Covers network failures and non-2xx responses that carry no
    application envelope.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        self.message = message or "Request failed"
        super().__init__(self.message)


class ApplicationError(OpsConsoleError):
    """Raised when the backend answers with ``success: false``."""

    def __init__(self, message: str | None = None):
        self.message = message
        super().__init__(message or "Request rejected by the order backend")


class InvalidTransitionError(OpsConsoleError):
    """Raised when an action is invoked while its gate is closed."""

    def __init__(self, action: str, status: str | None, reason: str | None = None):
        self.action = action
        self.status = status
        msg = f"Cannot {action} an order in status {status!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class ConfigurationError(OpsConsoleError):
    """Raised when required settings are missing."""

    def __init__(self, setting: str, reason: str | None = None):
        self.setting = setting
        msg = f"Missing configuration value: {setting}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
