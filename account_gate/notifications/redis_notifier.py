"""Redis-backed notifier queueing gate messages for a background mailer."""

from __future__ import annotations

import logging

from redis import Redis

from ..domain.account import Account
from .messages import ApprovalInstructions, ConfirmationInstructions

logger = logging.getLogger(__name__)


class RedisNotifier:
    """Pushes confirmation and approval messages onto Redis lists.

    Delivery is fire-and-forget: a mail worker owned by the host pops the
    lists and renders the actual emails.
    """

    def __init__(
        self,
        client: Redis,
        *,
        approval_recipient: str | None,
        confirmation_queue: str = "account-gate:confirmation",
        approval_queue: str = "account-gate:approval",
    ) -> None:
        """Keep the Redis client, the administrator address and queue names."""
        self._client = client
        self._approval_recipient = approval_recipient or None
        self._confirmation_queue = confirmation_queue
        self._approval_queue = approval_queue

    def deliver_confirmation_instructions(self, account: Account) -> None:
        message = ConfirmationInstructions.from_account(account)
        self._client.rpush(self._confirmation_queue, message.model_dump_json())
        logger.info("queued confirmation instructions for account %s", account.account_id)

    def deliver_approval_instructions(self, account: Account) -> None:
        if self._approval_recipient is None:
            logger.warning(
                "approval recipient not configured; approval instructions for account %s dropped",
                account.account_id,
            )
            return
        message = ApprovalInstructions.from_account(account, self._approval_recipient)
        self._client.rpush(self._approval_queue, message.model_dump_json())
        logger.info("queued approval instructions for account %s", account.account_id)
