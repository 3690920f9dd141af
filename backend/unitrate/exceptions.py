"""
Domain exceptions for the cost aggregation engine.

The engine is total over well-formed input; these are raised only when the
caller opts into strict behaviour (DivisorPolicy.RAISE, assert_consistent).
"""


class EstimatorError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, code: str = "ESTIMATOR_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class DegenerateDivisorError(EstimatorError):
    """Raised when a rate would be computed against a non-positive divisor."""

    def __init__(self, field_name: str, entity_code: str = "", value: object = 0):
        label = f"'{entity_code}'" if entity_code else "(unnamed)"
        message = (
            f"Equipment {label} has {field_name} = {value}; "
            f"depreciation per unit is undefined"
        )
        super().__init__(message, code="DEGENERATE_DIVISOR")
        self.field_name = field_name
        self.entity_code = entity_code
        self.value = value


class ConsistencyError(EstimatorError):
    """Raised when the explosion grand total disagrees with the BoQ summary."""

    def __init__(self, grand_total: float, summary_total: float, rel_tol: float):
        message = (
            f"Resource explosion grand total {grand_total:,.6f} does not match "
            f"Σ BoQ summary total {summary_total:,.6f} "
            f"(relative tolerance {rel_tol:g})"
        )
        super().__init__(message, code="CONSISTENCY_FAILED")
        self.grand_total = grand_total
        self.summary_total = summary_total
        self.rel_tol = rel_tol
