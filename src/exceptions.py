"""Central exception definitions shared across the application."""


class ProviderUnavailableError(Exception):
    """Raised when an outbound capability (AI provider or messaging channel) fails.

    Covers HTTP errors, API-level errors and timeouts. Callers log the full
    context and reply to the user with a generic apology.
    """


class RateLimitedError(Exception):
    """Raised when the rate governor rejects an operation."""

    def __init__(self, key: str, operation: str, retry_after_seconds: int) -> None:
        """Initialise RateLimitedError.

        :param key: Client identity the limit applies to.
        :param operation: Operation class that was rejected.
        :param retry_after_seconds: Seconds until the operation can be retried.
        """
        self.key = key
        self.operation = operation
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Rate limit exceeded for {operation} (key={key}), "
            f"retry after {retry_after_seconds}s"
        )
