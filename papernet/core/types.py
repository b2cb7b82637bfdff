"""Value types shared by every layer: UtcDatetime and TransactionId."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import final


@final
@dataclass(frozen=True, slots=True)
class UtcDatetime:
    """Aware datetime in UTC; error and proposal timestamps use it."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires an aware datetime, got naive")

    @staticmethod
    def now() -> UtcDatetime:
        return UtcDatetime(value=datetime.now(tz=UTC))


@final
@dataclass(frozen=True, slots=True)
class TransactionId:
    """Hex SHA-256 of the proposal nonce followed by the creator bytes.

    A fresh nonce per proposal makes every submission a new transaction,
    which is why a resubmitted redeem can apply twice.
    """

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 64:
            raise TypeError(f"TransactionId must be 64 hex chars, got {len(self.value)}")

    @staticmethod
    def derive(nonce: bytes, creator: bytes) -> TransactionId:
        return TransactionId(value=hashlib.sha256(nonce + creator).hexdigest())
