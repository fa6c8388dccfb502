class ConfigurationError(ValueError):
    """Raised when a grid cannot be searched (bad dimensions, codes, or endpoints)."""


class SearchCancelled(Exception):
    """Unwinds the recursion when the harness asks the search to stop."""
