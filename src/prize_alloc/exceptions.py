"""
Custom exception types for prize-alloc.

Every exception carries a machine-readable code so callers can
handle specific failure modes programmatically.
"""


class PrizeAllocError(Exception):
    """Base exception for all prize-alloc errors."""

    def __init__(self, message: str, code: str = "PRIZE_ALLOC_ERROR"):
        self.code = code
        super().__init__(message)


class InvalidBudgetError(PrizeAllocError):
    """Raised when a budget is negative or not a finite number."""

    def __init__(self, budget: float):
        self.budget = budget
        super().__init__(
            f"Budget must be a finite, non-negative number (got {budget!r})",
            code="INVALID_BUDGET",
        )


class InvalidStepError(PrizeAllocError):
    """Raised when a spend increment is not strictly positive."""

    def __init__(self, message: str, step: float | None = None):
        self.step = step
        super().__init__(message, code="INVALID_STEP")


class DegenerateCurveError(PrizeAllocError):
    """Raised when response-curve parameters are not strictly positive."""

    def __init__(self, message: str, curve: str = ""):
        self.curve = curve
        super().__init__(message, code="DEGENERATE_CURVE")


class PlanValidationError(PrizeAllocError):
    """Raised when a run request has no live period or no channel."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, code="PLAN_VALIDATION")


class ConfigError(PrizeAllocError):
    """Raised when a configuration or request file cannot be used."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message, code="CONFIG_ERROR")
