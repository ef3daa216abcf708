import logging
from typing import Any, Dict, Optional

from django.db import DatabaseError

from registry.models import AuditEvent

logger = logging.getLogger(__name__)


def log_action(*, user_id: Optional[int], action: str, object_type: Optional[str] = None,
               object_id: Optional[int] = None, detail: Optional[Dict[str, Any]] = None) -> Optional[AuditEvent]:
    """Record an audit event.  A failed write is logged and never fails the caller."""
    try:
        return AuditEvent.objects.create(
            user_id=user_id,
            action=action,
            object_type=object_type,
            object_id=object_id,
            detail=detail or {},
        )
    except DatabaseError as exc:
        logger.warning('Audit write for %s failed: %s', action, exc.__class__.__name__)
        return None
