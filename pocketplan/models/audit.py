"""
Audit Models for PocketPlan

Every backend round trip, session transition and rejected form is
recorded as an AuditEvent. Events are written to the local structured
log; they are never sent to the backend.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Resource stores
    COLLECTION_LOADED = "collection_loaded"
    ENTITY_CREATED = "entity_created"
    ENTITY_REPLACED = "entity_replaced"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_REMOVED = "entity_removed"
    REQUEST_FAILED = "request_failed"

    # Authentication
    LOGIN_LINK_REQUESTED = "login_link_requested"
    LOGIN_VERIFIED = "login_verified"
    LOGIN_FAILED = "login_failed"
    SESSION_RESTORED = "session_restored"
    SESSION_CLEARED = "session_cleared"
    LOGGED_OUT = "logged_out"

    # Form layer
    VALIDATION_FAILED = "validation_failed"
    BALANCE_CHECK_REJECTED = "balance_check_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which resource is this about?
    resource: Optional[str] = Field(
        default=None,
        description="Resource name (e.g., 'budget', 'transaction', 'session')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Backend id of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "resource": self.resource,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.collection_loaded("budget", 12)
        event = AuditEventBuilder.request_failed("transaction", "create", message, error)
    """

    @staticmethod
    def collection_loaded(resource: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOADED,
            severity=AuditSeverity.DEBUG,
            resource=resource,
            description=f"Loaded {count} {resource} record(s)",
            details={"count": count},
        )

    @staticmethod
    def entity_written(
        resource: str,
        operation: str,
        entity_id: Optional[int],
        replaced: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        if operation == "create":
            event_type = (
                AuditEventType.ENTITY_REPLACED if replaced
                else AuditEventType.ENTITY_CREATED
            )
        elif operation == "remove":
            event_type = AuditEventType.ENTITY_REMOVED
        else:
            event_type = AuditEventType.ENTITY_UPDATED
        return AuditEvent(
            event_type=event_type,
            resource=resource,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{resource.capitalize()} {event_type.value.split('_')[1]}",
            details={"operation": operation},
            is_user_action=True,
        )

    @staticmethod
    def request_failed(
        resource: str,
        operation: str,
        message: str,
        error: str,
        entity_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_FAILED,
            severity=AuditSeverity.ERROR,
            resource=resource,
            entity_id=entity_id,
            description=message,
            details={"operation": operation},
            error_message=error,
        )

    @staticmethod
    def session_transition(
        event_type: AuditEventType,
        description: str,
        error: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING if error else AuditSeverity.INFO,
            resource="session",
            description=description,
            error_message=error,
            is_user_action=event_type in (
                AuditEventType.LOGIN_LINK_REQUESTED,
                AuditEventType.LOGIN_VERIFIED,
                AuditEventType.LOGGED_OUT,
            ),
        )

    @staticmethod
    def validation_failed(
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            resource=form,
            correlation_id=correlation_id,
            description=f"{form.capitalize()} form rejected with {len(issues)} issue(s)",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def balance_check_rejected(
        category_id: int,
        amount: str,
        available: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_CHECK_REJECTED,
            severity=AuditSeverity.WARNING,
            resource="transaction",
            correlation_id=correlation_id,
            description=(
                f"Savings withdrawal of {amount} exceeds available balance {available}"
            ),
            details={
                "category_id": category_id,
                "amount": amount,
                "available_balance": available,
            },
            is_user_action=True,
        )
