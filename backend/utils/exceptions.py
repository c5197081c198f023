"""Domain errors raised by the crud layer.

Routers never translate these by hand; ``main.py`` registers a single exception
handler that renders any ``BillingError`` as ``{"detail", "code", **context}``.
None of them are retried: they describe input the caller has to correct.
"""
from typing import Any, Dict, Optional


class BillingError(Exception):
    status_code = 400
    code = "BILLING_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, **context: Any):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "code": self.code}
        body.update(self.context)
        return body


class ValidationError(BillingError):
    """Missing or invalid required field, zero-quantity item."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(BillingError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(BillingError):
    """Duplicate bill number."""
    status_code = 409
    code = "CONFLICT"


class StockExceededError(BillingError):
    status_code = 409
    code = "STOCK_EXCEEDED"

    def __init__(self, message: str, max_allowed, **context: Any):
        super().__init__(message, max_allowed=float(max_allowed), **context)
        self.max_allowed = max_allowed


class BusinessRuleError(BillingError):
    """Transport charge without a vehicle, dispatch charge before packing."""
    status_code = 422
    code = "BUSINESS_RULE_VIOLATION"


VEHICLE_REQUIRED = "VEHICLE_REQUIRED"
PACKING_REQUIRED = "PACKING_REQUIRED"
