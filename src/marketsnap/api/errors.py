"""Exceptions raised by the market data client."""


class MarketDataClientError(Exception):
    """Base exception for market data client errors."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class MarketDataAPIError(MarketDataClientError):
    """Exception for HTTP error responses from the API."""

    pass


class EmptyResponseError(MarketDataClientError):
    """The API answered with an empty or wrongly shaped body."""

    pass


class RetryExhaustedError(MarketDataClientError):
    """All attempts for a request failed."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"Request failed after {attempts} attempts: {url}")
        self.url = url
        self.attempts = attempts
