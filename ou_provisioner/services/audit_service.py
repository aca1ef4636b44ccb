import json
import logging
import os
from typing import Optional, Dict

from ou_provisioner.core.config import settings
from ou_provisioner.models.audit import AuditEvent

logger = logging.getLogger(__name__)


class AuditService:
    """
    Append-only audit trail of organizational unit changes.

    Each event is written as one JSON object per line to ``file_path``
    (``AUDIT_LOG_PATH`` by default). The directory is created on first write.
    """

    def __init__(self, file_path: Optional[str] = None) -> None:
        self.file_path = file_path or settings.audit_log_path

    def log(
        self,
        *,
        actor: str,
        action: str,
        resource_id: str,
        status: str = "success",
        message: Optional[str] = None,
        details: Optional[Dict] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            actor=actor,
            action=action,
            resource_id=resource_id,
            status=status,  # type: ignore[arg-type]
            message=message,
            details=details,
        )
        directory = os.path.dirname(self.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        line = event.model_dump(mode="json")
        with open(self.file_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(line, ensure_ascii=False) + "\n")
        logger.debug(f"Audit {action} {resource_id}: {status}")
        return event


def get_audit_service() -> AuditService:
    return AuditService()
