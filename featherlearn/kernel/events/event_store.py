"""
Event Store service for append-only audit logging.

Reward-bearing changes are logged here in the same transaction as the
change itself, so the log and the user row never disagree after commit.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from featherlearn.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.LESSON_COMPLETED,
            entity_type="lesson",
            entity_id=lesson.id,
            user_id=current_user.id,
            payload={"score": 90, "xp": 45},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> EventLog:
        """
        Append an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: The type of entity (user, lesson, league, quest)
            entity_id: The ID of the entity
            user_id: The acting user (optional for system events)
            payload: Additional event data
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            The created EventLog record (added to the session, not flushed)
        """
        if payload:
            payload = self._serialize_payload(payload)

        event = EventLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            payload=payload or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        self.session.add(event)
        return event

    async def log_from_model(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        user_id: Optional[uuid.UUID],
        payload_model: BaseModel,
    ) -> EventLog:
        """Log an event using a Pydantic model as payload."""
        return await self.log(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            payload=payload_model.model_dump(mode="json", exclude_none=True),
        )

    async def get_user_activity(
        self,
        user_id: uuid.UUID,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[EventLog]:
        """
        Get all events triggered by a specific user.

        Args:
            user_id: The user ID
            since: Start datetime filter (inclusive)
            until: End datetime filter (exclusive)
            event_types: Optional filter for specific event types
            limit: Maximum number of events
            offset: Number of events to skip

        Returns:
            List of EventLog records, newest first
        """
        query = select(EventLog).where(EventLog.user_id == user_id)

        if since:
            query = query.where(EventLog.created_at >= since)
        if until:
            query = query.where(EventLog.created_at < until)
        if event_types:
            query = query.where(EventLog.event_type.in_([e.value for e in event_types]))

        query = query.order_by(desc(EventLog.created_at)).offset(offset).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def sum_payload_field(
        self,
        user_id: uuid.UUID,
        event_type: EventType,
        field: str,
        since: Optional[datetime] = None,
    ) -> int:
        """
        Sum an integer payload field over a user's events of one type.

        JSON extraction differs between backends, so payloads are summed here.
        """
        query = select(EventLog.payload).where(
            EventLog.user_id == user_id,
            EventLog.event_type == event_type.value,
        )
        if since:
            query = query.where(EventLog.created_at >= since)

        result = await self.session.execute(query)
        total = 0
        for payload in result.scalars().all():
            value = (payload or {}).get(field)
            if isinstance(value, int):
                total += value
        return total

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        return {key: self._serialize_value(value) for key, value in payload.items()}

    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, dict):
            return self._serialize_payload(value)
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        if hasattr(value, "value") and not isinstance(value, (int, str)):
            return value.value
        return value
