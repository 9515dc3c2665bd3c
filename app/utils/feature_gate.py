"""
Feature gating for subscription-based access control.

FeatureGate is the only place call sites talk to the entitlement engine:
it reads the user's plan profile and fresh usage counts from the database,
asks the policy for a decision on one ProtectedAction and, on denial,
raises PlanAccessDeniedError naming the tier that unlocks the action.

A gate lives for one request. The profile is read once per gate; usage
counts are re-read on every evaluation.

Failure to read entitlement data never lets an action through: database
errors surface as EntitlementUnavailableError (503).
"""
import datetime as dt
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import metrics
from app.core.exceptions import EntitlementUnavailableError, PlanAccessDeniedError
from app.services import usage_service
from app.services.plan_access import (
    ActionDecision,
    PlanAccessService,
    PlanProfile,
    ProtectedAction,
    evaluate_action,
)
from app.services.plan_access.policy import COUNT_ACTIONS


logger = logging.getLogger(__name__)


class FeatureGate:
    """Check whether a user may perform protected actions."""

    def __init__(self, db: Session, user_id: int, service: PlanAccessService, lock: bool = False):
        """
        Args:
            db: Database session
            user_id: Owner of the plan being checked
            service: Entitlement evaluator bound to the application's catalog
            lock: Select the user's row FOR UPDATE; use in creation flows so the
                count check and the insert happen under one row lock
        """
        self.db = db
        self.user_id = user_id
        self.service = service
        self.lock = lock
        self._profile: PlanProfile | None = None

    @property
    def profile(self) -> PlanProfile:
        if self._profile is None:
            try:
                self._profile = usage_service.get_user_plan_profile(self.db, self.user_id, lock=self.lock)
            except SQLAlchemyError as exc:
                logger.exception("Plan profile lookup failed for user %s", self.user_id)
                raise EntitlementUnavailableError(self.user_id) from exc
        return self._profile

    def current_usage(self, action: ProtectedAction, now: dt.datetime | None = None) -> int:
        """Fresh usage count for a count-limited action."""
        try:
            if action is ProtectedAction.CREATE_INVOICE:
                return usage_service.get_monthly_invoice_count(self.db, self.user_id, now)
            if action is ProtectedAction.CREATE_CLIENT:
                return usage_service.get_client_count(self.db, self.user_id)
        except SQLAlchemyError as exc:
            logger.exception("Usage count failed for user %s action %s", self.user_id, action.value)
            raise EntitlementUnavailableError(self.user_id) from exc
        raise ValueError(f"{action.value} is not count-limited")

    def evaluate(
        self,
        action: ProtectedAction,
        index: int | None = None,
        now: dt.datetime | None = None,
    ) -> tuple[ActionDecision, int | None]:
        """
        Decide an action without raising.

        Returns:
            (decision, current_count) - current_count is None for actions
            that are not count-limited
        """
        profile = self.profile
        count = self.current_usage(action, now) if action in COUNT_ACTIONS else None
        decision = evaluate_action(self.service, action, profile, count=count, index=index, now=now)
        metrics.entitlement_checked(action.value, "allowed" if decision.allowed else decision.code.value)
        return decision, count

    def require(
        self,
        action: ProtectedAction,
        index: int | None = None,
        now: dt.datetime | None = None,
    ) -> ActionDecision:
        """
        Raise PlanAccessDeniedError unless the action is allowed.

        Raises:
            PlanAccessDeniedError: 403 with reason, denial code and upgrade tier
            EntitlementUnavailableError: 503 when plan/usage data can't be read
        """
        decision, count = self.evaluate(action, index=index, now=now)
        if decision.allowed:
            return decision

        result = decision.result
        current_plan = self.service.normalize_plan(self.profile.plan).value
        logger.info(
            "Plan denial user=%s action=%s code=%s plan=%s upgrade=%s count=%s",
            self.user_id,
            action.value,
            decision.code.value,
            current_plan,
            result.upgrade_required.value if result.upgrade_required else None,
            count,
        )
        raise PlanAccessDeniedError(
            action=action.value,
            reason=result.reason or "Upgrade your plan to continue.",
            denial_code=decision.code.value,
            upgrade_required=result.upgrade_required.value if result.upgrade_required else None,
            current_plan=current_plan,
            current_count=count,
            limit=decision.limit,
        )
