"""Email confirmation and administrative approval gates for accounts."""

from .domain.account import Account
from .domain.contracts import CreateAccountInput, GateResult
from .domain.errors import (
    AlreadyConfirmedError,
    BlankError,
    GateError,
    InvalidError,
    NotFoundError,
    StaleAccountError,
)
from .domain.gate import AccountGate

__all__ = [
    "Account",
    "AccountGate",
    "AlreadyConfirmedError",
    "BlankError",
    "CreateAccountInput",
    "GateError",
    "GateResult",
    "InvalidError",
    "NotFoundError",
    "StaleAccountError",
]
