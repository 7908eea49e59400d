class ThemeError(Exception):
    pass


class GatewayError(ThemeError):
    """A settings API call failed. `status_code` is None for network errors."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self):
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message
