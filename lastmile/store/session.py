"""Signed-in user for this device."""

import json
import logging

from pydantic import ValidationError

from lastmile.models.sharing import User, normalize_username
from lastmile.store.kv import KeyValueStore

logger = logging.getLogger(__name__)

USER_KEY = "user"


class SessionStore:
    """Current-user record kept in the key-value store."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def login(self, username: str) -> User:
        """Sign in as username (normalized).

        Raises:
            ValueError: If the username is blank after normalization
        """
        normalized = normalize_username(username)
        if not normalized:
            raise ValueError("Username must not be empty")

        user = User(username=normalized)
        self._kv.set(USER_KEY, user.model_dump_json(by_alias=True))
        logger.info(f"User @{user.username} signed in")
        return user

    def logout(self) -> None:
        """Forget the current user."""
        self._kv.remove(USER_KEY)

    def current_user(self) -> User | None:
        """Return the signed-in user, or None."""
        raw = self._kv.get(USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Discarding unreadable user record: {e}")
            return None
