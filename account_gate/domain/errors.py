"""Field-level errors attached to accounts by gate operations."""

from __future__ import annotations


class GateError(ValueError):
    """A business-rule failure reported against a single account field.

    Gate operations never raise these; they attach them to the account's
    error set and to the returned :class:`~account_gate.domain.contracts.GateResult`.
    """

    code: str = "invalid"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"{field} {self.code.replace('_', ' ')}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GateError):
            return NotImplemented
        return type(self) is type(other) and self.field == other.field

    def __hash__(self) -> int:
        return hash((type(self), self.field))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(field={self.field!r})"


class AlreadyConfirmedError(GateError):
    code = "already_confirmed"


class NotFoundError(GateError):
    code = "not_found"


class BlankError(GateError):
    code = "blank"


class InvalidError(GateError):
    code = "invalid"


ERRORS_BY_CODE: dict[str, type[GateError]] = {
    cls.code: cls for cls in (AlreadyConfirmedError, NotFoundError, BlankError, InvalidError)
}


def error_for(code: str, field: str) -> GateError:
    """Build the error registered for ``code`` against ``field``."""
    try:
        return ERRORS_BY_CODE[code](field)
    except KeyError as exc:
        raise ValueError(f"unknown error code: {code}") from exc


class StaleAccountError(RuntimeError):
    """Raised by the store when an update loses an optimistic-lock race."""

    def __init__(self, account_id: str, lock_version: int) -> None:
        self.account_id = account_id
        self.lock_version = lock_version
        super().__init__(
            f"account {account_id} was modified concurrently (expected version {lock_version})"
        )
