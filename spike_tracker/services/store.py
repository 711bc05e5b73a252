"""
In-memory store for users and logs

Reference collaborator for the event service and the test suite. Records
are deep-copied on the way in and out, so callers always work on their
own snapshot and write it back explicitly.

Updates for one device id must be serialized: take `store.lock(device_id)`
around every read-modify-write of that user's record.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from spike_tracker.models.log import SugarLog
from spike_tracker.models.user import User

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Users keyed by device id, logs keyed by log id"""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._logs: Dict[str, SugarLog] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def lock(self, device_id: str) -> asyncio.Lock:
        """Per-device lock guarding read-modify-write of that user's state"""
        return self._locks[device_id]

    async def get_user(self, device_id: str) -> Optional[User]:
        user = self._users.get(device_id)
        return user.model_copy(deep=True) if user else None

    async def save_user(self, user: User) -> None:
        self._users[user.device_id] = user.model_copy(deep=True)
        logger.debug(f"Saved user {user.device_id}")

    async def get_log(self, log_id: str) -> Optional[SugarLog]:
        log = self._logs.get(log_id)
        return log.model_copy(deep=True) if log else None

    async def save_log(self, log: SugarLog) -> None:
        self._logs[log.id] = log.model_copy(deep=True)
        logger.debug(f"Saved log {log.id} for user {log.user_id}")

    async def list_logs(self, device_id: str, limit: int = 20) -> List[SugarLog]:
        """Logs for a device, newest first"""
        logs = [log for log in self._logs.values() if log.user_id == device_id]
        logs.sort(key=lambda log: log.created_at, reverse=True)
        return [log.model_copy(deep=True) for log in logs[:limit]]
