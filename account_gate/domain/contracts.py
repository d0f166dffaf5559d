"""Domain-level contracts shared between the gate and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Protocol

from .account import Account
from .errors import GateError

LOOKUP_FIELDS = frozenset({"account_id", "email", "confirmation_token", "approval_token"})

TokenGenerator = Callable[[], str]


@dataclass(slots=True)
class CreateAccountInput:
    """Inputs required to register an account, including creation-time skips."""

    email: str
    disabled: bool = False
    skip_confirmation: bool = False
    skip_approval: bool = False


@dataclass(slots=True)
class GateResult:
    """Outcome of a gate operation: the account plus any field errors raised."""

    account: Account
    errors: list[GateError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok

    def errors_on(self, field_name: str) -> list[GateError]:
        return [error for error in self.errors if error.field == field_name]


class AccountStore(Protocol):
    """Persistence operations the gate needs from the host's account storage."""

    def find_by_field(self, field_name: str, value: str) -> Account | None: ...

    def save(self, account: Account, validate: bool = True) -> bool: ...

    def find_or_initialize_with_error(
        self, field_name: str, value: str | None, error: str = "not_found"
    ) -> Account: ...


class Notifier(Protocol):
    """Outbound notification channel; delivery failures are the notifier's concern."""

    def deliver_confirmation_instructions(self, account: Account) -> None: ...

    def deliver_approval_instructions(self, account: Account) -> None: ...
