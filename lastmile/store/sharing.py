"""Sharing trip snapshots between users.

Every snapshot is appended to a global log; snapshots addressed to the
signed-in user also land in that user's inbox. Snapshots are copies and are
never edited; the inbox can only be cleared as a whole.
"""

import json
import logging
import uuid

from pydantic import TypeAdapter, ValidationError

from lastmile.intel.merge import now_ms
from lastmile.models.sharing import SharedSnapshot, normalize_username
from lastmile.models.trip import TripAnalysis
from lastmile.store.kv import KeyValueStore
from lastmile.store.session import SessionStore

logger = logging.getLogger(__name__)

INBOX_KEY = "inbox"
ALL_SNAPSHOTS_KEY = "all_snapshots"
ANONYMOUS = "anonymous"

_snapshot_list = TypeAdapter(list[SharedSnapshot])


class SnapshotService:
    """Creates snapshots and manages the inbox and global log."""

    def __init__(self, kv: KeyValueStore, session: SessionStore) -> None:
        self._kv = kv
        self._session = session

    def share(
        self,
        analysis: TripAnalysis,
        recipient: str,
        *,
        sent_at_ms: int | None = None,
    ) -> SharedSnapshot:
        """Send a copy of analysis to recipient.

        Args:
            analysis: Trip analysis to copy
            recipient: Recipient handle, with or without "@"
            sent_at_ms: Send instant; defaults to now

        Returns:
            The created snapshot

        Raises:
            ValueError: If the recipient is blank after normalization
        """
        to = normalize_username(recipient)
        if not to:
            raise ValueError("Recipient must not be empty")

        user = self._session.current_user()
        snapshot = SharedSnapshot.model_validate(
            {
                "id": uuid.uuid4().hex,
                "from": user.username if user else ANONYMOUS,
                "to": to,
                "data": analysis.model_copy(deep=True),
                "sentAt": sent_at_ms if sent_at_ms is not None else now_ms(),
            }
        )

        self._save(ALL_SNAPSHOTS_KEY, [*self._load(ALL_SNAPSHOTS_KEY), snapshot])
        if user is not None and snapshot.to == user.username:
            self._save(INBOX_KEY, [snapshot, *self._load(INBOX_KEY)])

        logger.info(f"Snapshot {snapshot.id} dispatched from @{snapshot.from_} to @{snapshot.to}")
        return snapshot

    def inbox(self) -> list[SharedSnapshot]:
        """Snapshots received by this device, newest first."""
        return self._load(INBOX_KEY)

    def find(self, snapshot_id: str) -> SharedSnapshot | None:
        """Look up an inbox snapshot by id."""
        return next((s for s in self.inbox() if s.id == snapshot_id), None)

    def clear_inbox(self) -> None:
        """Remove every snapshot from the inbox."""
        self._kv.remove(INBOX_KEY)

    def all_snapshots(self) -> list[SharedSnapshot]:
        """Global log of every snapshot sent, oldest first."""
        return self._load(ALL_SNAPSHOTS_KEY)

    def _load(self, key: str) -> list[SharedSnapshot]:
        raw = self._kv.get(key)
        if raw is None:
            return []
        try:
            return _snapshot_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable snapshot list {key!r}: {e.error_count()} error(s)")
            return []

    def _save(self, key: str, snapshots: list[SharedSnapshot]) -> None:
        self._kv.set(key, json.dumps(_snapshot_list.dump_python(snapshots, mode="json", by_alias=True)))
