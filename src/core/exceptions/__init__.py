from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    DuplicateError,
    InsufficientPoolFundsError,
    InstallmentNotFoundError,
    InvalidAmountError,
    InvalidTotalMarksError,
    ConcurrentUpdateError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "DuplicateError",
    "InsufficientPoolFundsError",
    "InstallmentNotFoundError",
    "InvalidAmountError",
    "InvalidTotalMarksError",
    "ConcurrentUpdateError",
]
