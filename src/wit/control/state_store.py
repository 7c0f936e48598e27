"""
State Store - Locked access to the single persisted state record

Every read and write goes through one exclusive asyncio lock. Callers that
need a consistent read-decide-write hold the lock for the whole sequence
with ``transaction()``.
"""
import asyncio
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import AsyncIterator, Optional

import structlog

from wit.errors import MalformedStateError, StateIOError
from wit.models.state import State

logger = structlog.get_logger(__name__)


class StateTransaction:
    """
    Unlocked view of a store, handed out while the store lock is held

    Only valid inside the ``transaction()`` block that created it.
    """

    def __init__(self, store: "StateStore"):
        self._store = store
        self.writes = 0

    async def get(self) -> State:
        return self._store._load()

    async def set(self, state: State) -> None:
        self._store._save(state)
        self.writes += 1


class StateStore(ABC):
    """
    Base class for state storage

    Subclasses provide raw byte access; this class handles the lock,
    serialisation and error translation.
    """

    def __init__(self, name: str):
        """
        Args:
            name: Human-readable store name (for logs and statistics)
        """
        self.name = name
        self.lock = asyncio.Lock()
        self.reads = 0
        self.writes = 0
        self.failures = 0

    @abstractmethod
    def _read(self) -> Optional[bytes]:
        """
        Return the stored bytes, or None if nothing has been stored yet

        Raises:
            OSError: If storage exists but cannot be read
        """

    @abstractmethod
    def _write(self, data: bytes) -> None:
        """
        Replace the stored bytes

        Raises:
            OSError: If storage cannot be written
        """

    def _load(self) -> State:
        try:
            data = self._read()
        except OSError as e:
            self.failures += 1
            logger.error("state_read_failed", store=self.name, error=str(e))
            raise StateIOError(f"unable to read state: {e}") from e

        self.reads += 1
        if data is None:
            return State()

        try:
            return State.from_json(data)
        except MalformedStateError as e:
            self.failures += 1
            logger.error("state_malformed", store=self.name, error=str(e))
            raise

    def _save(self, state: State) -> None:
        try:
            self._write(state.to_json())
        except OSError as e:
            self.failures += 1
            logger.error("state_write_failed", store=self.name, error=str(e))
            raise StateIOError(f"unable to write state: {e}") from e

        self.writes += 1
        logger.debug(
            "state_saved",
            store=self.name,
            op_mode=state.op_mode,
            manual=state.manual,
            override=state.override,
            running=state.running,
        )

    async def get(self) -> State:
        """
        Get the current state

        Returns:
            The stored state, or a zero-valued State if none exists yet

        Raises:
            StateIOError: If storage is unreadable
            MalformedStateError: If the stored record is invalid
        """
        async with self.lock:
            return self._load()

    async def set(self, state: State) -> None:
        """
        Persist the full state record, replacing any prior content

        Raises:
            StateIOError: If storage cannot be written
        """
        async with self.lock:
            self._save(state)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StateTransaction]:
        """
        Hold the store lock for a read-decide-write sequence

        Nothing is written unless the caller calls ``set`` on the yielded
        transaction.
        """
        async with self.lock:
            yield StateTransaction(self)

    def get_statistics(self) -> dict:
        return {
            "name": self.name,
            "reads": self.reads,
            "writes": self.writes,
            "failures": self.failures,
            "locked": self.lock.locked(),
        }


class JsonFileStateStore(StateStore):
    """
    State kept in a JSON file

    Writes go to a temporary file in the same directory which then
    replaces the target, so a failed write leaves the previous record
    intact.
    """

    def __init__(self, path: Path):
        """
        Args:
            path: Location of the state file (e.g. /var/lib/wit/state.json)
        """
        super().__init__("json-file")
        self.path = Path(path)
        logger.info("state_store_initialized", path=str(self.path))

    def _read(self) -> Optional[bytes]:
        if not self.path.exists():
            return None
        return self.path.read_bytes()

    def _write(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
        except OSError:
            with suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def get_statistics(self) -> dict:
        stats = super().get_statistics()
        stats["path"] = str(self.path)
        return stats


class MemoryStateStore(StateStore):
    """State kept in an in-process byte buffer"""

    def __init__(self, initial: Optional[bytes] = None):
        """
        Args:
            initial: Bytes to start with (None behaves like a missing file)
        """
        super().__init__("memory")
        self.data = initial

    def _read(self) -> Optional[bytes]:
        return self.data

    def _write(self, data: bytes) -> None:
        self.data = data
