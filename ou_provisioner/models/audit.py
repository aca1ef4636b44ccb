from datetime import datetime, timezone
from typing import Optional, Dict, Literal
from pydantic import BaseModel, Field


class AuditEvent(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str
    action: str
    resource_type: Literal["ou"] = "ou"
    resource_id: str
    status: Literal["success", "failure"]
    message: Optional[str] = None
    details: Optional[Dict] = None
