class ContentStudioError(Exception):
    """Base exception for Content Studio."""

    pass


class ProviderError(ContentStudioError):
    """Raised when the generation provider call fails or returns nothing usable."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class StoreError(ContentStudioError):
    """Raised when a balance or artifact store operation fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")
