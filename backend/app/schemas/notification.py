"""Pydantic schemas for Notifications and approvals."""
from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, model_validator


class MarkRead(BaseModel):
    notification_id: Optional[str] = None
    mark_all_as_read: bool = False

    @model_validator(mode="after")
    def _one_target(self):
        if not self.notification_id and not self.mark_all_as_read:
            raise ValueError("notification_id or mark_all_as_read is required")
        return self


class ApprovalAction(BaseModel):
    type: Literal["event", "performance"]
    id: str
    action: Literal["approve", "decline"]
    reason: Optional[str] = None
