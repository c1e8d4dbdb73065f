# campuschat/core/errors.py
"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to the end user. Ledger and payment errors abort the enclosing database
transaction because they propagate out of ``session.begin()``.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(AppError):
    status_code = 401
    default_message = "Invalid token"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class InsufficientFunds(AppError):
    status_code = 402
    default_message = "Insufficient coins"

    def __init__(
        self,
        balance: Optional[int] = None,
        required: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.balance = balance
        self.required = required
        if message is None and balance is not None and required is not None:
            message = f"Insufficient coins. This requires {required} coins. You have {balance} coins."
        super().__init__(message)


class PaymentError(AppError):
    status_code = 400
    default_message = "Payment verification failed"


class DuplicateReference(PaymentError):
    default_message = "This payment reference has already been used"


class AmountMismatch(PaymentError):
    default_message = "Payment amount mismatch"


class VerificationFailed(PaymentError):
    default_message = "Payment verification failed"


class ConcurrentModification(AppError):
    status_code = 409
    default_message = "Balance changed concurrently, please retry"


class DependencyUnavailable(AppError):
    status_code = 503
    default_message = "Service temporarily unavailable"


class VerifierUnavailable(DependencyUnavailable):
    default_message = "Payment gateway is unavailable, please try again later"
