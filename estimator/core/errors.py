"""Domain errors raised while loading pricing configuration"""


class ConfigurationError(ValueError):
    """Catalog or rule table data that must never reach request time."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)
