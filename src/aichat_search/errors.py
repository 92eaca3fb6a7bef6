"""Exceptions raised while searching conversation stores."""


class SearchError(Exception):
    """Base exception for aichat-search."""


class MissingQueryError(SearchError):
    """Raised when a search is requested without a query string."""

    def __init__(self, message: str = "No search query provided"):
        super().__init__(message)


class StoreUnavailableError(SearchError):
    """Raised when a store database is absent or cannot be opened."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Store {path} unavailable: {reason}")


class RecordParseError(SearchError):
    """Raised when a single stored record cannot be decoded."""

    def __init__(self, label: str, reason: str):
        self.label = label
        self.reason = reason
        super().__init__(f"Cannot decode {label}: {reason}")
