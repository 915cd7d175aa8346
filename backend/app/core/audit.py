"""Audit logging for terminology changes.

Review decisions and concept store writes are emitted on a dedicated
"audit" logger as structured AuditEvent records. The definition_reviews
table is the durable trail; this log is the operational one.
"""

import logging
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

# Separate audit logger for terminology changes
audit_logger = logging.getLogger("audit")


class AuditAction(str, Enum):
    """Types of auditable actions."""

    # Concept store
    CREATE = "create"
    UPDATE = "update"

    # Review workflow
    APPROVE = "approve"
    REJECT = "reject"

    # System
    ERROR = "error"


class AuditEvent(BaseModel):
    """Audit event record."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction = Field(..., description="Type of action performed")
    resource_type: str = Field(..., description="Type of resource changed")
    resource_id: str | None = Field(None, description="ID of specific resource")
    user_id: str | None = Field(None, description="Reviewer or author")
    details: dict | None = Field(None, description="Additional context")
    success: bool = Field(True, description="Whether action succeeded")


def log_audit(
    action: AuditAction,
    resource_type: str,
    resource_id: str | None = None,
    user_id: str | None = None,
    details: dict | None = None,
    success: bool = True,
) -> AuditEvent:
    """Log an audit event.

    Args:
        action: Type of action being audited
        resource_type: The type of resource being changed
        resource_id: Specific resource identifier
        user_id: Reviewer or author performing the action
        details: Additional context
        success: Whether the action succeeded

    Returns:
        The created AuditEvent
    """
    event = AuditEvent(
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        user_id=user_id,
        details=details,
        success=success,
    )

    log_level = logging.INFO if success else logging.WARNING
    audit_logger.log(
        log_level,
        f"AUDIT: {action.value} {resource_type}"
        f"{f'/{resource_id}' if resource_id else ''}"
        f"{f' user={user_id}' if user_id else ''}"
        f" success={success}",
        extra={"audit_event": event.model_dump()},
    )

    return event


def log_review_decision(
    candidate_id: str,
    approved: bool,
    reviewer_id: str | None = None,
    concept_key: str | None = None,
    definition_version_id: str | None = None,
) -> AuditEvent:
    """Log the outcome of reviewing a term candidate."""
    details: dict = {}
    if concept_key:
        details["concept_key"] = concept_key
    if definition_version_id:
        details["definition_version_id"] = definition_version_id

    return log_audit(
        action=AuditAction.APPROVE if approved else AuditAction.REJECT,
        resource_type="term_candidate",
        resource_id=candidate_id,
        user_id=reviewer_id,
        details=details or None,
    )
