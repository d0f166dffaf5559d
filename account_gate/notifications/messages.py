"""Pydantic payloads queued for background delivery of gate notifications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr

from ..domain.account import Account


class MessageKind(str, Enum):
    confirmation_instructions = "confirmation_instructions"
    approval_instructions = "approval_instructions"


class ConfirmationInstructions(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    kind: MessageKind = MessageKind.confirmation_instructions
    account_id: str | None
    recipient: EmailStr
    confirmation_token: str
    sent_at: datetime
    version: str = "v1"

    @classmethod
    def from_account(cls, account: Account) -> "ConfirmationInstructions":
        return cls(
            account_id=account.account_id,
            recipient=account.email,
            confirmation_token=account.confirmation_token,
            sent_at=account.confirmation_sent_at,
        )


class ApprovalInstructions(BaseModel):
    """Request sent to the approving administrator, not to the account holder."""

    model_config = ConfigDict(use_enum_values=True)

    kind: MessageKind = MessageKind.approval_instructions
    account_id: str | None
    account_email: EmailStr
    recipient: EmailStr
    approval_token: str
    sent_at: datetime
    version: str = "v1"

    @classmethod
    def from_account(cls, account: Account, recipient: str) -> "ApprovalInstructions":
        return cls(
            account_id=account.account_id,
            account_email=account.email,
            recipient=recipient,
            approval_token=account.approval_token,
            sent_at=account.approval_sent_at,
        )
