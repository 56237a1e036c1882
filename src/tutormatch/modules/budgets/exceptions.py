"""
Budget Errors
"""

from uuid import UUID

from tutormatch.modules.shared.exceptions import NotFoundError, ServiceError


class TransactionNotFoundError(NotFoundError):
    """Raised when a budget transaction is not found."""

    def __init__(self, transaction_id: UUID | None = None):
        super().__init__("Budget transaction", transaction_id, error_code="TRANSACTION_NOT_FOUND")


class InvalidOriginalPaymentError(ServiceError):
    """Raised when a refund points at something other than an existing payment."""

    def __init__(self):
        super().__init__(
            message="Invalid original payment",
            error_code="INVALID_ORIGINAL_PAYMENT",
            status_code=400,
        )


class RefundAlreadyProcessedError(ServiceError):
    def __init__(self):
        super().__init__(
            message="A refund has already been processed for this payment",
            error_code="REFUND_ALREADY_PROCESSED",
            status_code=409,
        )


class RefundExceedsPaymentError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Refund amount cannot exceed original payment amount",
            error_code="REFUND_EXCEEDS_PAYMENT",
            status_code=400,
        )


class TransactionNotPartialError(ServiceError):
    """Raised when settling a transaction that is not a partial payment."""

    def __init__(self):
        super().__init__(
            message="Only partial payments can be marked as paid",
            error_code="TRANSACTION_NOT_PARTIAL",
            status_code=409,
        )
