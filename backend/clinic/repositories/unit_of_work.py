"""
SQLAlchemy implementation of the atomic store runner.

Each run_atomic call opens one session, hands the operation repositories
bound to it, and commits only if the operation returns. Admission
operations pass a lock key so concurrent check-and-insert sequences for the
same doctor (or the same email) run one at a time in this process; on
PostgreSQL the doctor row is additionally locked with SELECT ... FOR UPDATE
by the scheduler, which serializes across processes.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from clinic.core.exceptions import StoreError
from clinic.domain.interfaces import IStoreTransaction, IUnitOfWork

from .appointment_repo import AppointmentRepository
from .doctor_repo import DoctorRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0


class StoreTransaction(IStoreTransaction):
    """Repositories sharing one open session."""

    def __init__(self, session) -> None:
        self.session = session
        self.doctors = DoctorRepository(session)
        self.appointments = AppointmentRepository(session)


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """Process-wide mutual exclusion per string key.

    An entry exists only while some thread holds or waits for its key.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def _checkout(self, key: str) -> _LockEntry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _LockEntry()
            entry.users += 1
            return entry

    def _checkin(self, key: str, entry: _LockEntry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, key: Optional[str], timeout: float) -> Iterator[None]:
        if key is None:
            yield
            return
        entry = self._checkout(key)
        try:
            if not entry.lock.acquire(timeout=timeout):
                raise StoreError(
                    f"Timed out after {timeout:.1f}s waiting for lock '{key}'",
                    operation=key,
                )
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)


_process_locks = KeyedLocks()


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """Runs store operations in a single SQLAlchemy transaction."""

    def __init__(
        self,
        session_factory: Callable[[], object],
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
        locks: Optional[KeyedLocks] = None,
    ) -> None:
        self.session_factory = session_factory
        self.lock_timeout = lock_timeout
        self.locks = _process_locks if locks is None else locks

    def run_atomic(
        self,
        operation: Callable[[IStoreTransaction], T],
        lock_key: Optional[str] = None,
    ) -> T:
        with self.locks.hold(lock_key, self.lock_timeout):
            session = self.session_factory()
            try:
                result = operation(StoreTransaction(session))
                session.commit()
                return result
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "Store transaction rolled back",
                    extra={
                        "context": {
                            "lock_key": lock_key,
                            "error": exc.__class__.__name__,
                        }
                    },
                    exc_info=True,
                )
                raise StoreError(
                    f"Store operation failed: {exc.__class__.__name__}",
                    operation=lock_key,
                ) from exc
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()
