from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import EmailStr, TypeAdapter, ValidationError

from .errors import BlankError, GateError, InvalidError

_email_adapter = TypeAdapter(EmailStr)


class FieldErrors(dict[str, list[GateError]]):
    """Mapping of field name to the gate errors reported against it."""

    def add(self, error: GateError) -> None:
        self.setdefault(error.field, []).append(error)

    def all(self) -> list[GateError]:
        return [error for errors in self.values() for error in errors]


@dataclass(slots=True)
class Account:
    """Aggregate root carrying the confirmation and approval gate state."""

    email: str
    account_id: str | None = None
    created_at: datetime | None = None
    disabled: bool = False
    confirmation_token: str | None = None
    confirmed_at: datetime | None = None
    confirmation_sent_at: datetime | None = None
    approval_token: str | None = None
    is_approved: bool = False
    approval_sent_at: datetime | None = None
    lock_version: int = 0
    persisted: bool = False
    errors: FieldErrors = field(default_factory=FieldErrors, repr=False, compare=False)
    # transient, never written by a store
    skip_confirmation_requested: bool = field(default=False, repr=False, compare=False)
    skip_approval_requested: bool = field(default=False, repr=False, compare=False)

    @property
    def new_record(self) -> bool:
        return not self.persisted

    def validate(self) -> bool:
        """Run attribute validations, replacing ``errors`` with the failures found."""
        self.errors.clear()
        if not self.email:
            self.errors.add(BlankError("email"))
            return False
        try:
            _email_adapter.validate_python(self.email)
        except ValidationError:
            self.errors.add(InvalidError("email"))
            return False
        return True
