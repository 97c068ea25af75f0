class ScrapeError(Exception):
    """Scraping a page failed."""


class NetworkError(ScrapeError):
    """The page could not be fetched (connection failure, timeout, HTTP error)."""


class ContentError(ScrapeError):
    """The page was fetched but too little text could be extracted."""


class LLMError(Exception):
    """
    A chat completion call failed.

    `retryable` is decided where the provider error is caught, so the retry
    loop never has to inspect the error text.
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class MalformedOutputError(LLMError):
    """The model answered, but not with the expected JSON shape."""

    def __init__(self, message: str):
        super().__init__(message, retryable=False)
