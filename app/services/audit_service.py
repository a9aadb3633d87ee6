"""
Audit trail for seat changes and PII access
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.services.repositories import AuditRepo

logger = logging.getLogger("app.audit")


def record_audit_event(db: Optional[Session], action: str, target_id: Optional[str] = None, **details: Any) -> bool:
    """Persist an audit event and mirror it to the audit logger.

    Audit writes never block the operation being audited: a failure is logged
    and reported through the return value only.
    """
    logger.info(f"{action} target={target_id} details={details}")
    try:
        AuditRepo.add(db, action, target_id, details)
        return True
    except Exception as e:
        logger.warning(f"Audit log write failed for {action}: {e}")
        return False
