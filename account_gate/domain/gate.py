"""Confirmation and approval workflows that decide whether an account may sign in."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from .. import metrics
from ..security.tokens import generate_friendly_token
from .account import Account
from .contracts import AccountStore, CreateAccountInput, GateResult, Notifier, TokenGenerator
from .errors import AlreadyConfirmedError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountGate:
    """Email confirmation and administrative approval gates for accounts.

    The gate mutates the gate fields on :class:`Account` and persists them
    through the injected store. Business failures (confirming twice, unknown
    tokens) are reported as field errors on the returned :class:`GateResult`;
    only store and notifier failures propagate as exceptions.
    """

    def __init__(
        self,
        store: AccountStore,
        notifier: Notifier,
        *,
        confirm_within: timedelta = timedelta(0),
        token_generator: TokenGenerator = generate_friendly_token,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Store collaborators and the confirmation grace period."""
        self._store = store
        self._notifier = notifier
        self._confirm_within = confirm_within
        self._token_generator = token_generator
        self._clock = clock

    @property
    def confirm_within(self) -> timedelta:
        return self._confirm_within

    # -- creation -----------------------------------------------------------

    def create_account(self, payload: CreateAccountInput) -> GateResult:
        """Build, gate and persist a new account from creation inputs."""
        account = Account(email=payload.email, disabled=payload.disabled)
        if payload.skip_confirmation:
            self.skip_confirmation(account)
        if payload.skip_approval:
            self.skip_approval(account)
        return self.register(account)

    def register(self, account: Account) -> GateResult:
        """Persist a new account, issuing an approval token unless approval was skipped."""
        account.errors.clear()
        if account.persisted:
            raise ValueError("account is already persisted")

        if not account.skip_approval_requested:
            self.generate_approval_token(account)

        if not self._store.save(account, validate=True):
            return GateResult(account, account.errors.all())

        account.skip_confirmation_requested = False
        account.skip_approval_requested = False
        logger.info(
            "account %s registered (approved=%s confirmed=%s)",
            account.account_id,
            account.is_approved,
            account.confirmed_at is not None,
        )
        return GateResult(account)

    # -- confirmation gate --------------------------------------------------

    def confirm(self, account: Account) -> GateResult:
        """Mark the account's email as confirmed.

        An already confirmed account is left untouched and an
        :class:`AlreadyConfirmedError` is reported on ``email``.
        """
        account.errors.clear()
        if self.is_confirmed(account):
            return self._already_confirmed(account)

        account.confirmation_token = None
        account.confirmed_at = self._clock()
        self._store.save(account, validate=False)
        metrics.record("confirmed")
        logger.info("account %s confirmed", account.account_id)
        return GateResult(account)

    def is_confirmed(self, account: Account) -> bool:
        return account.persisted and account.confirmed_at is not None

    def send_confirmation_instructions(self, account: Account) -> None:
        """Deliver confirmation instructions, issuing a token first when none exists."""
        if self._ensure_confirmation_token(account) and account.persisted:
            self._store.save(account, validate=False)
        self._deliver_confirmation(account)

    def resend_confirmation_token(self, account: Account) -> GateResult:
        """Re-deliver confirmation instructions without forcing a new token."""
        account.errors.clear()
        if self.is_confirmed(account):
            return self._already_confirmed(account)
        self.send_confirmation_instructions(account)
        return GateResult(account)

    def is_within_confirmation_period(self, account: Account) -> bool:
        """Return ``True`` while the confirmation grace period is still running.

        A zero-length ``confirm_within`` means there is no grace period at all.
        """
        if not self._confirm_within or account.confirmation_sent_at is None:
            return False
        return self._clock() - account.confirmation_sent_at <= self._confirm_within

    def generate_confirmation_token(self, account: Account) -> None:
        account.confirmed_at = None
        account.confirmation_token = self._token_generator()
        account.confirmation_sent_at = self._clock()

    def skip_confirmation(self, account: Account) -> None:
        """Treat the account as confirmed from creation; no token is issued."""
        account.confirmed_at = self._clock()
        account.skip_confirmation_requested = True

    # -- approval gate ------------------------------------------------------

    def approve(self, account: Account) -> GateResult:
        """Approve the account and start its confirmation step.

        Approving is unconditional, so repeated calls converge on the same state.
        """
        account.errors.clear()
        account.is_approved = True
        account.approval_token = None
        self._ensure_confirmation_token(account)
        self._store.save(account, validate=False)
        metrics.record("approved")
        logger.info("account %s approved", account.account_id)
        self._deliver_confirmation(account)
        return GateResult(account)

    def is_approved(self, account: Account) -> bool:
        return account.is_approved

    def send_approval_instructions(self, account: Account) -> None:
        """Deliver approval instructions, issuing a token first when none exists."""
        if account.approval_token is None:
            self.generate_approval_token(account)
            if account.persisted:
                self._store.save(account, validate=False)
        self._notifier.deliver_approval_instructions(account)
        metrics.record("approval_sent")

    def skip_approval(self, account: Account) -> None:
        account.is_approved = True
        account.skip_approval_requested = True

    def skip_confirm_and_approve(self, account: Account) -> None:
        self.skip_confirmation(account)
        self.skip_approval(account)

    def generate_approval_token(self, account: Account) -> None:
        account.is_approved = False
        account.approval_token = self._token_generator()
        account.approval_sent_at = self._clock()

    # -- activation ---------------------------------------------------------

    def is_active(self, account: Account, *, require_approval: bool = False) -> bool:
        """Return whether the account may authenticate.

        Approval is only taken into account when ``require_approval`` is set;
        hosts that enforce approval elsewhere can leave it off.
        """
        confirmation_required = not account.skip_confirmation_requested
        active = self._base_active(account) and (
            not confirmation_required
            or self.is_confirmed(account)
            or self.is_within_confirmation_period(account)
        )
        if require_approval:
            return active and self.is_approved(account)
        return active

    def inactive_reason(self, account: Account) -> str | None:
        if not self.is_confirmed(account):
            return "unconfirmed"
        return self._base_inactive_reason(account)

    def _base_active(self, account: Account) -> bool:
        return not account.disabled

    def _base_inactive_reason(self, account: Account) -> str | None:
        return "disabled" if account.disabled else None

    # -- lookups ------------------------------------------------------------

    def send_confirmation_instructions_by_email(self, email: str | None) -> GateResult:
        """Resend confirmation instructions to the account registered for ``email``."""
        account = self._store.find_or_initialize_with_error("email", email, "not_found")
        if account.new_record:
            return self._lookup_missed(account, "email")
        return self.resend_confirmation_token(account)

    def confirm_by_token(self, token: str | None) -> GateResult:
        """Confirm the account holding ``token``."""
        account = self._store.find_or_initialize_with_error("confirmation_token", token)
        if account.new_record:
            return self._lookup_missed(account, "confirmation_token")
        return self.confirm(account)

    def approve_by_token(self, token: str | None) -> GateResult:
        """Approve the account holding approval ``token``."""
        account = self._store.find_or_initialize_with_error("approval_token", token)
        if account.new_record:
            return self._lookup_missed(account, "approval_token")
        return self.approve(account)

    # -- helpers ------------------------------------------------------------

    def _ensure_confirmation_token(self, account: Account) -> bool:
        if account.confirmation_token is not None:
            return False
        self.generate_confirmation_token(account)
        return True

    def _deliver_confirmation(self, account: Account) -> None:
        self._notifier.deliver_confirmation_instructions(account)
        metrics.record("confirmation_sent")

    def _already_confirmed(self, account: Account) -> GateResult:
        error = AlreadyConfirmedError("email")
        account.errors.add(error)
        metrics.record("confirmation_rejected")
        logger.info("account %s is already confirmed", account.account_id)
        return GateResult(account, [error])

    def _lookup_missed(self, account: Account, field_name: str) -> GateResult:
        metrics.record("lookup_missed")
        logger.info("no account matched lookup on %s", field_name)
        return GateResult(account, account.errors.all())
