"""
Pipeline Exceptions
"""

from typing import Any, Optional


class SalesPipelineError(ValueError):
    """Base class for errors that abort a pipeline run"""


class MalformedInputError(SalesPipelineError):
    """
    Raised when input values cannot be coerced to the declared column types.

    This is the only fatal condition: it is raised before any stage runs.
    Business-rule violations are repaired or reported instead.
    """

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        bad_values: int = 0,
        example: Any = None,
    ):
        super().__init__(message)
        self.column = column
        self.bad_values = bad_values
        self.example = example
