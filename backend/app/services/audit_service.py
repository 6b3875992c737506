"""
Audit trail writer.

Every state-changing admin operation records an AuditLog row and a matching
structured log line. Sensitive keys are redacted before anything is stored.
"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import logger
from app.models.audit_log import AuditLog, AuditAction, AuditSeverity


SENSITIVE_KEYS = {"password", "ssn", "social_security", "bank_account", "credit_card"}
REDACTED = "[REDACTED]"


def sanitize_audit_data(data: Any) -> Any:
    """Recursively replace values of sensitive keys"""
    if isinstance(data, dict):
        return {
            key: REDACTED if key.lower() in SENSITIVE_KEYS else sanitize_audit_data(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [sanitize_audit_data(item) for item in data]
    if hasattr(data, "value") and isinstance(getattr(data, "value"), str):
        return data.value  # enum members
    if data is None or isinstance(data, (str, int, float, bool)):
        return data
    return str(data)


class AuditService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        action: AuditAction,
        resource: str,
        resource_id: Optional[str],
        user_id: Optional[str],
        school_id: Optional[str],
        severity: AuditSeverity = AuditSeverity.LOW,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """Add an audit row to the current unit of work (caller commits)"""
        entry = AuditLog(
            action=action,
            resource=resource,
            resource_id=resource_id,
            user_id=user_id,
            school_id=school_id,
            severity=severity,
            details=sanitize_audit_data(details or {}),
        )
        self.db.add(entry)

        logger.log_audit_event(
            action.value,
            resource,
            resource_id=str(resource_id) if resource_id else None,
            severity=severity.value,
        )
        return entry


def get_audit_service(db: AsyncSession) -> AuditService:
    return AuditService(db)
