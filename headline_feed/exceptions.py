class FetchError(Exception):
    """Raised when one source cannot be fetched (network, HTTP status, timeout)."""

    def __init__(self, reason: str, source_name: str = "") -> None:
        self.reason = reason
        self.source_name = source_name
        prefix = f"{source_name}: " if source_name else ""
        super().__init__(f"{prefix}{reason}")


class ExtractionError(FetchError):
    """Raised when a fetched feed or page yields no headline candidates."""


class AllSourcesFailedError(Exception):
    """Raised when every source configured for a category failed."""

    def __init__(self, category: str, errors=None) -> None:
        self.category = category
        self.errors = list(errors or [])
        super().__init__(f"All sources failed for category {category!r}")


class ParseError(Exception):
    """Raised when a timestamp cannot be parsed."""
