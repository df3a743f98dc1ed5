"""Audit logging service."""

import logging
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)

SUCCESS = "success"
FAILED = "failed"
PENDING = "pending"


class AuditRepository(Protocol):
    """Persistence interface for audit log entries."""

    def append(self, log_type: str, action: str, details: str, outcome: str) -> None:
        """Append an audit log entry."""


@dataclass
class AuditService:
    """Fire-and-forget audit trail for kitchen operations."""

    repository: AuditRepository
    log_type: str = "kitchen"

    def record(self, action: str, details: str, outcome: str = SUCCESS) -> None:
        """Append an entry; a failing write is logged and never raised."""
        try:
            self.repository.append(
                log_type=self.log_type,
                action=action,
                details=details,
                outcome=outcome,
            )
        except Exception:
            _logger.warning("Failed to write audit entry for %s", action, exc_info=True)
