"""
Security audit logging for admin authentication events.
"""

from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, asdict
import json
import logging


class AuditEventType(Enum):
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_LOCKED = "login_locked"
    ACCOUNT_LOCKED = "account_locked"
    ACCOUNT_CREATED = "account_created"
    TOKEN_ISSUED = "token_issued"
    TOKEN_REJECTED = "token_rejected"


class AuditEventSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class AuditEvent:
    """A single security-relevant event."""
    event_type: AuditEventType
    severity: AuditEventSeverity
    timestamp: datetime
    account_id: Optional[str] = None
    username: Optional[str] = None
    ip_address: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event_type"] = self.event_type.value
        data["severity"] = self.severity.value
        data["timestamp"] = self.timestamp.isoformat()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class AuditLogger:
    """
    Writes audit events as JSON lines to the ``mmc_admin.audit`` logger and
    keeps the most recent ones in memory for inspection.
    """

    def __init__(self, app_name: str = "mmc_admin", max_events: int = 1000):
        self.app_name = app_name
        self.logger = logging.getLogger(f"{app_name}.audit")
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    def log_event(self, event: AuditEvent) -> None:
        self._events.append(event)

        log_level = {
            AuditEventSeverity.INFO: logging.INFO,
            AuditEventSeverity.WARNING: logging.WARNING,
            AuditEventSeverity.ERROR: logging.ERROR,
        }.get(event.severity, logging.INFO)

        self.logger.log(log_level, event.to_json())

    def _record(self, event_type: AuditEventType, severity: AuditEventSeverity, **fields) -> None:
        self.log_event(AuditEvent(
            event_type=event_type,
            severity=severity,
            timestamp=datetime.now(timezone.utc),
            **fields
        ))

    def log_login_success(self, account_id: str, username: str, ip_address: Optional[str] = None) -> None:
        self._record(AuditEventType.LOGIN_SUCCESS, AuditEventSeverity.INFO,
                     account_id=account_id, username=username, ip_address=ip_address)

    def log_login_failed(self, username: str, reason: str, ip_address: Optional[str] = None) -> None:
        self._record(AuditEventType.LOGIN_FAILED, AuditEventSeverity.WARNING,
                     username=username, ip_address=ip_address, success=False, error_message=reason)

    def log_login_locked(self, account_id: str, username: str, ip_address: Optional[str] = None) -> None:
        """Login attempted while the account is inside its lock window."""
        self._record(AuditEventType.LOGIN_LOCKED, AuditEventSeverity.WARNING,
                     account_id=account_id, username=username, ip_address=ip_address, success=False)

    def log_account_locked(self, account_id: str, username: str, attempts: int,
                           ip_address: Optional[str] = None) -> None:
        self._record(AuditEventType.ACCOUNT_LOCKED, AuditEventSeverity.WARNING,
                     account_id=account_id, username=username, ip_address=ip_address,
                     details={"reason": "Too many failed login attempts", "attempts": attempts})

    def log_account_created(self, account_id: str, username: str, created_by: str) -> None:
        self._record(AuditEventType.ACCOUNT_CREATED, AuditEventSeverity.INFO,
                     account_id=account_id, username=username, details={"created_by": created_by})

    def log_token_issued(self, account_id: str, username: str, ip_address: Optional[str] = None) -> None:
        self._record(AuditEventType.TOKEN_ISSUED, AuditEventSeverity.INFO,
                     account_id=account_id, username=username, ip_address=ip_address,
                     details={"token_type": "access"})

    def log_token_rejected(self, reason: str, ip_address: Optional[str] = None) -> None:
        self._record(AuditEventType.TOKEN_REJECTED, AuditEventSeverity.WARNING,
                     ip_address=ip_address, success=False, error_message=reason)

    def get_events(
        self,
        username: Optional[str] = None,
        event_type: Optional[AuditEventType] = None,
        limit: int = 100
    ) -> List[AuditEvent]:
        """
        Retrieve recent audit events, optionally filtered by username and type.
        """
        filtered_events = list(self._events)

        if username is not None:
            filtered_events = [e for e in filtered_events if e.username == username]

        if event_type is not None:
            filtered_events = [e for e in filtered_events if e.event_type == event_type]

        return filtered_events[-limit:]

    def clear(self) -> None:
        self._events.clear()


# Global audit logger instance
_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    """Get or create the audit logger instance."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
