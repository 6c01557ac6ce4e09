"""
Audit log repository for tracking changes.
"""

from datetime import datetime
from typing import Optional, List, Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base import BaseRepository
from ..models import AuditLogModel
from ...collaborators import AuditSink


class AuditRepository(BaseRepository[AuditLogModel], AuditSink):
    """Repository for Audit Log operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AuditLogModel)

    async def log_action(
        self,
        entity_type: str,
        entity_id: int,
        action: str,
        old_value: Optional[dict] = None,
        new_value: Optional[dict] = None,
        performed_by: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> AuditLogModel:
        """Log an action on an entity."""
        values: Dict[str, Any] = dict(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            old_value=old_value,
            new_value=new_value,
            performed_by=performed_by,
        )
        if created_at is not None:
            values["created_at"] = created_at
        return await self.create(**values)

    async def get_by_entity(
        self,
        entity_type: str,
        entity_id: int,
        limit: int = 50,
    ) -> List[AuditLogModel]:
        """Get audit logs for a specific entity."""
        result = await self.session.execute(
            select(AuditLogModel)
            .where(AuditLogModel.entity_type == entity_type)
            .where(AuditLogModel.entity_id == entity_id)
            .order_by(AuditLogModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def record_override(
        self,
        task_id: int,
        principal_id: Any,
        timestamp: datetime,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record a completion forced past incomplete prerequisites."""
        await self.log_action(
            entity_type="task",
            entity_id=task_id,
            action="completed",
            new_value={
                "status": "completed",
                "overridePrerequisites": True,
                "timestamp": timestamp.isoformat(),
                **(details or {}),
            },
            performed_by=str(principal_id),
            created_at=timestamp,
        )
