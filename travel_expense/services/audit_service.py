"""
Audit Service
Records review actions in the audit log table and the audit log file
"""

from sqlalchemy.orm import Session
from typing import Optional

from travel_expense.models.audit_log import AuditLog
from travel_expense.utils.logger import setup_logger, log_audit

logger = setup_logger()


class AuditService:
    """Audit trail writer"""

    def record(
        self,
        db: Session,
        actor_id: int,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        description: str,
        changes: Optional[dict] = None
    ) -> AuditLog:
        """
        Persist one audit entry

        Args:
            db: Database session
            actor_id: User who performed the action
            action: Action name, e.g. "TravelRequest Approved"
            entity_type: Affected entity type
            entity_id: Affected entity id
            description: Human readable details
            changes: Structured details

        Returns:
            AuditLog: Created entry
        """
        entry = AuditLog(
            user_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            changes=changes
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)

        log_audit(actor_id, action, description)
        return entry


# Create singleton instance
audit_service = AuditService()
