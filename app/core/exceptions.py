"""Custom exception hierarchy for the invoicing backend.

Every application error carries a user-facing message, a stable code and the
HTTP status the API layer should answer with. Plan denials are raised by call
sites only; the entitlement engine itself returns values and never raises.

Error codes follow pattern: [CATEGORY][NUMBER]
- INV: Invoice errors (001-099)
- PLN: Plan / entitlement errors (001-099)
- TPL: Template errors (001-099)
- USR: User/Auth errors (100-199)
- PAY: Payment / billing errors (200-299)
"""

from __future__ import annotations

from typing import Any


class InvoiceAppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# PLAN / ENTITLEMENT ERRORS (PLN001-099)
# ============================================================================

class PlanError(InvoiceAppException):
    """Base class for plan and entitlement errors."""
    pass


class PlanAccessDeniedError(PlanError):
    """The user's tier or subscription does not permit the attempted action.

    `denial_code` tells the UI which prompt to show (LIMIT_REACHED,
    FEATURE_LOCKED, TEMPLATE_LOCKED, SUBSCRIPTION_INACTIVE) and
    `upgrade_required` names the tier that unlocks the action.
    """

    def __init__(
        self,
        action: str,
        reason: str,
        denial_code: str,
        upgrade_required: str | None,
        current_plan: str,
        current_count: int | None = None,
        limit: int | None = None,
    ):
        details: dict[str, Any] = {
            "action": action,
            "denial_code": denial_code,
            "upgrade_required": upgrade_required,
            "current_plan": current_plan,
        }
        if current_count is not None:
            details["current_count"] = current_count
        if limit is not None:
            details["limit"] = limit
        super().__init__(
            message=reason,
            code="PLN001",
            status_code=403,
            details=details,
        )
        self.action = action
        self.denial_code = denial_code
        self.upgrade_required = upgrade_required


class EntitlementUnavailableError(PlanError):
    """Plan or usage data could not be read; the action is refused."""

    def __init__(self, user_id: int):
        super().__init__(
            message="We couldn't verify your plan right now. Please try again shortly.",
            code="PLN002",
            status_code=503,
            details={"user_id": user_id},
        )


# ============================================================================
# INVOICE / TEMPLATE ERRORS
# ============================================================================

class InvoiceError(InvoiceAppException):
    """Base class for invoice-related errors."""
    pass


class InvoiceNotFoundError(InvoiceError):
    """Invoice does not exist or user doesn't have access."""

    def __init__(self, invoice_id: str | None = None):
        message = "Invoice not found" if not invoice_id else f"Invoice {invoice_id} not found"
        super().__init__(
            message=message,
            code="INV001",
            status_code=404,
            details={"invoice_id": invoice_id} if invoice_id else {},
        )


class TemplateNotFoundError(InvoiceAppException):
    """Template id is not part of the template catalog."""

    def __init__(self, template_id: str):
        super().__init__(
            message=f"Template '{template_id}' does not exist",
            code="TPL001",
            status_code=404,
            details={"template_id": template_id},
        )


# ============================================================================
# USER/AUTH ERRORS (USR100-199)
# ============================================================================

class UserError(InvoiceAppException):
    """Base class for user/authentication errors."""
    pass


class UserNotFoundError(UserError):
    """User does not exist."""

    def __init__(self, identifier: str | None = None):
        message = "User not found" if not identifier else f"User '{identifier}' not found"
        super().__init__(
            message=message,
            code="USR100",
            status_code=404,
            details={"identifier": identifier} if identifier else {},
        )


class UnauthorizedError(UserError):
    """Missing, expired or invalid credentials."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(
            message=reason,
            code="USR106",
            status_code=401,
        )


# ============================================================================
# PAYMENT ERRORS (PAY200-299)
# ============================================================================

class PaymentError(InvoiceAppException):
    """Base class for billing-related errors."""
    pass


class WebhookSignatureError(PaymentError):
    """Billing webhook payload failed signature verification."""

    def __init__(self, provider: str = "stripe"):
        super().__init__(
            message="Invalid webhook signature",
            code="PAY200",
            status_code=400,
            details={"provider": provider},
        )
