"""Session Management.

Researcher sessions live in Redis with a strict TTL. The portal only
resolves sessions to a researcher id; they are issued by the sign-in
service sharing the same Redis keyspace.
"""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as aioredis

from app.config import get_settings
from app.exceptions import UnauthorizedError
from app.logging_config import get_logger

logger = get_logger(__name__)


class SessionManager:
    """Redis-backed researcher session store."""

    PREFIX = "session:"

    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis
        self.settings = get_settings()

    async def create(self, researcher_id: str, data: dict[str, Any] | None = None) -> str:
        """Create a session for ``researcher_id`` and return its ID.

        Writes the record layout the sign-in service uses for this keyspace.
        """
        session_id = str(uuid.uuid4())
        session_data = {
            **(data or {}),
            "researcher_id": researcher_id,
            "session_id": session_id,
            "created_at": datetime.now(UTC).isoformat(),
        }

        await self.redis.setex(
            f"{self.PREFIX}{session_id}",
            self.settings.redis_session_ttl,
            json.dumps(session_data),
        )

        logger.info("session_created", session_id=session_id)
        return session_id

    async def get(self, session_id: str) -> dict[str, Any]:
        """Retrieve session data.

        Raises UnauthorizedError if the session expired or doesn't exist.
        """
        data = await self.redis.get(f"{self.PREFIX}{session_id}")
        if data is None:
            raise UnauthorizedError()
        return json.loads(data)

    async def resolve_researcher(self, session_id: str | None) -> str:
        """Return the researcher id bound to ``session_id``."""
        if not session_id:
            raise UnauthorizedError()
        session = await self.get(session_id)
        researcher_id = session.get("researcher_id")
        if not researcher_id:
            logger.warning("session_without_researcher", session_id=session_id)
            raise UnauthorizedError()
        return str(researcher_id)

