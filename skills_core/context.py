"""Session context: the signed-in account and its session-scoped resources.

One SessionContext is constructed per client session and passed explicitly
to whatever needs it. It owns the progress refresh signal and, for cartório
accounts, the heartbeat job.
"""

import logging
from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from .enums import AccountType
from .errors import NotAuthenticated
from .heartbeat import send_heartbeat, start_heartbeat
from .refresh import ProgressRefresh

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    account_id: UUID
    account_type: AccountType
    owner_id: UUID | None = None
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.account_type == AccountType.admin

    @classmethod
    def from_row(cls, row: dict) -> "Account":
        return cls(
            account_id=row["account_id"],
            account_type=AccountType(row["account_type"]),
            owner_id=row.get("owner_id"),
            name=row.get("name"),
        )


AuthListener = Callable[[Account | None], None]


class SessionContext:
    def __init__(self, refresh: ProgressRefresh | None = None):
        self.refresh = refresh or ProgressRefresh()
        self._account: Account | None = None
        self._listeners: list[AuthListener] = []
        self._stop_heartbeat: Callable[[], None] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._account is not None

    def current_account(self) -> Account | None:
        return self._account

    def require_account(self) -> Account:
        if self._account is None:
            raise NotAuthenticated("No account is signed in")
        return self._account

    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register a callback for sign-in/sign-out; returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self._account)
            except Exception:
                logger.exception("Auth change listener failed")

    def init(self, account: Account) -> None:
        """Sign an account in. Cartório accounts get a session heartbeat."""
        if self._account is not None:
            self._teardown()

        self._account = account
        if account.account_type == AccountType.cartorio:
            self._stop_heartbeat = start_heartbeat(account.account_id)

        logger.info("Session started for account %s", account.account_id)
        self._notify()

    async def on_focus(self) -> bool:
        """Window regained focus: send an extra heartbeat for cartório sessions."""
        if self._account is None or self._account.account_type != AccountType.cartorio:
            return False
        return await send_heartbeat(self._account.account_id)

    def _teardown(self) -> None:
        if self._stop_heartbeat is not None:
            self._stop_heartbeat()
            self._stop_heartbeat = None

    def sign_out(self) -> None:
        """Stop session jobs and clear the account."""
        if self._account is None:
            return

        account_id = self._account.account_id
        self._teardown()
        self._account = None
        logger.info("Session ended for account %s", account_id)
        self._notify()
