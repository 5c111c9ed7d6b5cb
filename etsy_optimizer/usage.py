"""
usage.py — Plan tier + daily generation counter.

The store never touches storage directly: it reads and writes one serialized
UserState through a repository (`load() -> str | None`, `save(raw)`).
JsonFileRepository keeps the record in a JSON file under a fixed key, the
local-profile equivalent of browser storage; InMemoryRepository is for tests
and throwaway sessions.

Usage:
    store = UsageStore(JsonFileRepository(Path("~/.etsy_optimizer").expanduser()))
    if store.can_generate():
        ...
        store.increment_usage()
"""

from __future__ import annotations

import logging
import math
import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from .models import PAID_PLANS, UserState

logger = logging.getLogger(__name__)

STORAGE_KEY = "etsy_optimizer_user"
DAILY_FREE_LIMIT = 3
DEFAULT_STATE_DIR = Path(os.environ.get("ETSY_OPTIMIZER_STATE_DIR", "~/.etsy_optimizer")).expanduser()


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


# ── Repositories ──────────────────────────────────────────────────────────────

class UserStateRepository(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, raw: str) -> None: ...


class InMemoryRepository:
    def __init__(self, raw: Optional[str] = None) -> None:
        self.raw = raw

    def load(self) -> Optional[str]:
        return self.raw

    def save(self, raw: str) -> None:
        self.raw = raw


class JsonFileRepository:
    """One `<key>.json` file inside `state_dir`."""

    def __init__(self, state_dir: Path = DEFAULT_STATE_DIR, key: str = STORAGE_KEY) -> None:
        self.path = Path(state_dir) / f"{key}.json"

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, raw: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(raw, encoding="utf-8")


# ── Store ─────────────────────────────────────────────────────────────────────

class UsageStore:
    def __init__(
        self,
        repository: UserStateRepository,
        today: Callable[[], date] = _utc_today,
        daily_limit: int = DAILY_FREE_LIMIT,
    ) -> None:
        self.repository = repository
        self.today = today
        self.daily_limit = daily_limit

    def get_state(self) -> UserState:
        """Current state, with the daily counter reset on a new day.

        Missing or unreadable records yield the default free state.
        """
        today = self.today()
        try:
            raw = self.repository.load()
            if raw:
                state = UserState.model_validate_json(raw)
                if state.last_usage_date != today:
                    state = state.model_copy(update={"daily_usage": 0, "last_usage_date": today})
                    self._save(state)
                return state
        except (OSError, ValueError) as e:
            logger.error(f"Error reading user state: {e}")

        return UserState(plan="free", daily_usage=0, last_usage_date=today)

    def _save(self, state: UserState) -> None:
        try:
            self.repository.save(state.model_dump_json())
        except OSError as e:
            logger.error(f"Error saving user state: {e}")

    def is_premium(self) -> bool:
        return self.get_state().is_premium

    def can_generate(self) -> bool:
        state = self.get_state()
        if state.is_premium:
            return True
        return state.daily_usage < self.daily_limit

    def remaining(self) -> Union[int, float]:
        """Generations left today; math.inf on paid plans."""
        state = self.get_state()
        if state.is_premium:
            return math.inf
        return max(0, self.daily_limit - state.daily_usage)

    def increment_usage(self) -> None:
        state = self.get_state()
        self._save(state.model_copy(update={
            "daily_usage": state.daily_usage + 1,
            "last_usage_date": self.today(),
        }))

    def upgrade(self, plan: str, email: Optional[str] = None) -> UserState:
        if plan not in PAID_PLANS:
            raise ValueError(f"Unknown plan {plan!r} — expected one of {PAID_PLANS}")
        state = self.get_state()
        update = {"plan": plan}
        if email:
            update["email"] = email
        state = state.model_copy(update=update)
        self._save(state)
        logger.info(f"Plan upgraded to {plan}")
        return state

    # ── Email capture ──

    def email(self) -> Optional[str]:
        return self.get_state().email

    def has_email(self) -> bool:
        return bool(self.get_state().email)

    def set_email(self, email: str) -> None:
        self._save(self.get_state().model_copy(update={"email": email}))
