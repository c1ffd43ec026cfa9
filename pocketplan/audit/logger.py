"""
Audit Logger

Every significant client action is logged:
- collection loads and their sizes
- every create / update / remove and whether it replaced an existing row
- every failed backend call, with the message shown to the user
- session transitions (link requested, verified, restored, cleared)
- forms rejected before reaching the backend

Events go to structlog and to a bounded in-memory history.
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pocketplan.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Events are rendered as JSON through structlog. The most recent events
    are also kept in memory so the UI can show an activity feed.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("pocketplan.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

    def log_collection_loaded(self, resource: str, count: int) -> None:
        self.log(AuditEventBuilder.collection_loaded(resource, count))

    def log_entity_written(
        self,
        resource: str,
        operation: str,
        entity_id: Optional[int],
        replaced: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful create, update or remove."""
        self.log(AuditEventBuilder.entity_written(
            resource=resource,
            operation=operation,
            entity_id=entity_id,
            replaced=replaced,
            correlation_id=correlation_id,
        ))

    def log_request_failed(
        self,
        resource: str,
        operation: str,
        message: str,
        error: Exception,
        entity_id: Optional[int] = None,
    ) -> None:
        """Log a backend failure together with the message shown to the user."""
        self.log(AuditEventBuilder.request_failed(
            resource=resource,
            operation=operation,
            message=message,
            error=f"{type(error).__name__}: {error}",
            entity_id=entity_id,
        ))

    def log_session(
        self,
        event_type: AuditEventType,
        description: str,
        error: Optional[Exception] = None,
    ) -> None:
        """Log an authentication state transition."""
        self.log(AuditEventBuilder.session_transition(
            event_type=event_type,
            description=description,
            error=str(error) if error else None,
        ))

    def log_validation_failed(
        self,
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_balance_check_rejected(
        self,
        category_id: int,
        amount: str,
        available: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.balance_check_rejected(
            category_id=category_id,
            amount=amount,
            available=available,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., a form submission).
    """
    return uuid4()
