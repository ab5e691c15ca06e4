from __future__ import annotations

import copy
import itertools
import threading
from datetime import datetime, timezone
from typing import Dict


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class MemoryMemberStore:
    def __init__(self) -> None:
        self._members: Dict[str, dict] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def list_page(self, offset: int = 0, limit: int = 50) -> list[dict]:
        with self._lock:
            items = list(self._members.values())
        offset = max(offset, 0)
        return [copy.deepcopy(m) for m in items[offset:offset + max(limit, 0)]]

    def count(self) -> int:
        with self._lock:
            return len(self._members)

    def get(self, member_id: str) -> dict | None:
        with self._lock:
            member = self._members.get(str(member_id))
        return copy.deepcopy(member) if member else None

    def create(self, data: dict) -> dict:
        with self._lock:
            member_id = str(next(self._ids))
            member = copy.deepcopy(data)
            member["id"] = member_id
            member["created_at"] = _now()
            member["updated_at"] = member["created_at"]
            self._members[member_id] = member
        return copy.deepcopy(member)

    def update(self, member_id: str, data: dict) -> dict | None:
        member_id = str(member_id)
        with self._lock:
            member = self._members.get(member_id)
            if member is None:
                return None
            member = copy.deepcopy(member)
            member.update(copy.deepcopy(data))
            member["id"] = member_id
            member["updated_at"] = _now()
            self._members[member_id] = member
        return copy.deepcopy(member)

    def delete(self, member_id: str) -> bool:
        with self._lock:
            return self._members.pop(str(member_id), None) is not None
