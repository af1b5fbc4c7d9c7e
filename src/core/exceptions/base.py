from decimal import Decimal
from typing import Any

from src.shared.utils.money import format_money


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(AppException):
    """Not authorized to perform action."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message=message, status_code=403)


class DuplicateError(AppException):
    """Duplicate resource."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} with {field}={value} already exists"
        super().__init__(message=message, status_code=409, details={"field": field, "value": value})


class InsufficientPoolFundsError(AppException):
    """Expense would overdraw a fee's medical & stationary pool."""

    def __init__(self, fee_id: int | None, attempted: Decimal, available: Decimal):
        self.fee_id = fee_id
        self.attempted = attempted
        self.available = available
        message = (
            f"Expense of {format_money(attempted)} exceeds the medical & stationary pool. "
            f"Available: {format_money(available)}"
        )
        super().__init__(
            message=message,
            status_code=400,
            details={
                "field": "amount",
                "fee_id": fee_id,
                "attempted": str(attempted),
                "available": str(available),
            },
        )


class InstallmentNotFoundError(NotFoundError):
    """Installment id does not belong to the given fee."""

    def __init__(self, fee_id: int | None, installment_id: int):
        self.fee_id = fee_id
        self.installment_id = installment_id
        AppException.__init__(
            self,
            message=f"Installment with id={installment_id} not found on fee {fee_id}",
            status_code=404,
            details={"fee_id": fee_id, "installment_id": installment_id},
        )


class InvalidAmountError(ValidationError):
    """Amount is non-numeric or not strictly positive."""

    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(f"Amount must be a positive number, got {amount!r}", field="amount")


class InvalidTotalMarksError(ValidationError):
    """Grade requested against an exam total of zero or less."""

    def __init__(self, total_marks: Any):
        super().__init__(
            f"Total marks must be greater than zero, got {total_marks!r}",
            field="total_marks",
        )


class ConcurrentUpdateError(AppException):
    """Row version kept changing under us; the caller should retry later."""

    def __init__(self, resource: str, identifier: Any, attempts: int):
        message = f"{resource} with id={identifier} was modified concurrently ({attempts} attempts)"
        super().__init__(
            message=message,
            status_code=409,
            details={"resource": resource, "id": identifier, "attempts": attempts},
        )
