"""
Domain exceptions.

Each exception maps to one category of failure an evaluation run can hit.
None of them are recovered from inside the domain: a run either completes
or aborts with one of these.
"""


class SearchClientError(RuntimeError):
    """A search backend request failed after all retry attempts."""


class DatasetValidationError(ValueError):
    """
    A relevance or frequency dataset contains malformed input.

    The message always names the file and line that failed validation.
    """

    def __init__(self, message: str, path: str | None = None, line_number: int | None = None):
        if path is not None and line_number is not None:
            message = f"{message} in file, line {line_number}: {path}"
        elif path is not None:
            message = f"{message} in file: {path}"
        super().__init__(message)
        self.path = path
        self.line_number = line_number


class NdcgInvariantError(AssertionError):
    """An NDCG score above 1.0 was computed. This is a scorer or data bug."""


class InconsistentAvailabilityError(RuntimeError):
    """Control and treatment disagree on whether a package ID exists."""
