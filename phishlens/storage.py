"""
In-memory record store for users, scans and feedback.

A single ``MemStorage`` is built when the app is created and handed to the
routes through ``app.state``. Nothing survives a restart. A durable backend
only has to provide the same methods and return the same pydantic records.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from phishlens.schemas import (
    Feedback,
    FeedbackCreate,
    Scan,
    ScanCreate,
    ScanType,
    Stats,
    User,
    UserCreate,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class UsernameTakenError(StorageError):
    def __init__(self, username: str):
        super().__init__(f"Username already exists: {username}")
        self.username = username


class FeedbackExistsError(StorageError):
    def __init__(self, scan_id: int):
        super().__init__(f"Feedback already submitted for scan {scan_id}")
        self.scan_id = scan_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(scans: List[Scan]) -> List[Scan]:
    # same-instant inserts keep insertion order, newest id first
    return sorted(scans, key=lambda s: (s.created_at, s.id), reverse=True)


class MemStorage:
    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._scans: Dict[int, Scan] = {}
        # keyed by scan id: at most one feedback per scan
        self._feedback: Dict[int, Feedback] = {}
        self._next_user_id = 1
        self._next_scan_id = 1
        self._next_feedback_id = 1

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next(
            (user for user in self._users.values() if user.username == username),
            None,
        )

    def create_user(self, data: UserCreate) -> User:
        with self._lock:
            if self.get_user_by_username(data.username) is not None:
                raise UsernameTakenError(data.username)
            user = User(id=self._next_user_id, **data.model_dump())
            self._next_user_id += 1
            self._users[user.id] = user
        logger.info(f"Created user {user.id}")
        return user

    # Scans

    def create_scan(self, data: ScanCreate) -> Scan:
        fields = data.model_dump()
        fields["details"] = fields["details"] or None
        with self._lock:
            scan = Scan(id=self._next_scan_id, created_at=_utcnow(), **fields)
            self._next_scan_id += 1
            self._scans[scan.id] = scan
        return scan

    def get_scan(self, scan_id: int) -> Optional[Scan]:
        return self._scans.get(scan_id)

    def get_scans(self, limit: int = 50, offset: int = 0) -> List[Scan]:
        scans = _newest_first(list(self._scans.values()))
        return scans[offset:offset + limit]

    def get_scans_by_type(self, scan_type: ScanType, limit: int = 50) -> List[Scan]:
        scans = [s for s in self._scans.values() if s.type == scan_type]
        return _newest_first(scans)[:limit]

    # Feedback

    def create_feedback(self, data: FeedbackCreate) -> Feedback:
        """
        Insert feedback unless the scan already has some.

        The check and the insert happen under one lock, so two concurrent
        submissions for the same scan cannot both succeed.

        Raises:
            FeedbackExistsError: the scan already has a feedback record.
        """
        fields = data.model_dump()
        fields["comment"] = fields["comment"] or None
        with self._lock:
            if data.scan_id in self._feedback:
                raise FeedbackExistsError(data.scan_id)
            feedback = Feedback(
                id=self._next_feedback_id, created_at=_utcnow(), **fields
            )
            self._next_feedback_id += 1
            self._feedback[data.scan_id] = feedback
        return feedback

    def get_feedback_by_scan_id(self, scan_id: int) -> Optional[Feedback]:
        return self._feedback.get(scan_id)

    # Stats

    def get_stats(self) -> Stats:
        scans = list(self._scans.values())
        return Stats(
            total_scans=len(scans),
            safe_count=sum(1 for s in scans if s.verdict == "safe"),
            phishing_count=sum(1 for s in scans if s.verdict == "phishing"),
            suspicious_count=sum(1 for s in scans if s.verdict == "suspicious"),
        )
