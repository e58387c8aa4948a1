"""Error taxonomy shared by the client, repository and CLI."""


class SSCError(Exception):
    """API error with code and message."""

    def __init__(self, code: str, message: str, status_code: int = 0):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


class ConfigurationError(SSCError):
    """Missing or invalid base URL, token or transport setting."""

    def __init__(self, message: str):
        super().__init__("CONFIG", message, 0)


class TransportError(SSCError):
    """Non-success response or network failure."""


class DecodeError(SSCError):
    """Response body does not match the expected envelope shape."""

    def __init__(self, message: str, status_code: int = 0, code: str = "DECODE"):
        super().__init__(code, message, status_code)
