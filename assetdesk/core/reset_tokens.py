"""Single-use, time-limited password reset tokens.

Tokens live in the ``password_reset_tokens`` collection. Each email has at most
one live token: issuing a new one drops the old. Expired tokens are not swept
in the background; they are purged the next time someone tries to use them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from uuid import uuid4

from ..db.blobstore import BlobStore, Collection
from ..schemas.user import ResetToken

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class ResetTokenRegistry:
    def __init__(
        self,
        blobs: BlobStore,
        *,
        clock: Callable[[], datetime],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        self.blobs = blobs
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    def _load(self) -> list[ResetToken]:
        tokens: list[ResetToken] = []
        for raw in self.blobs.load(Collection.RESET_TOKENS):
            try:
                tokens.append(ResetToken.model_validate(raw))
            except ValueError:
                continue
        return tokens

    def _save(self, tokens: list[ResetToken]) -> None:
        self.blobs.save(Collection.RESET_TOKENS, [t.to_record() for t in tokens])

    def generate(self, email: str) -> ResetToken:
        issued = ResetToken(
            token=str(uuid4()),
            email=email,
            expires_at=_epoch_ms(self.clock()) + self.ttl_seconds * 1000,
        )
        remaining = [t for t in self._load() if t.email != email]
        self._save([*remaining, issued])
        logger.info("reset_token.issued", extra={"extra_data": {"email": email}})
        return issued

    def find(self, token: str) -> ResetToken | None:
        return next((t for t in self._load() if t.token == token), None)

    def validate(self, token: str, email: str) -> bool:
        tokens = self._load()
        match = next((t for t in tokens if t.token == token and t.email == email), None)
        if match is None:
            return False
        if _epoch_ms(self.clock()) > match.expires_at:
            self._save([t for t in tokens if t.token != token])
            logger.info("reset_token.expired", extra={"extra_data": {"email": email}})
            return False
        return True

    def remove(self, token: str) -> None:
        tokens = self._load()
        self._save([t for t in tokens if t.token != token])
