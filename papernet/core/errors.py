"""Error values for every failure the redeem flow can meet.

Nothing in the wallet, gateway or decoder raises for an expected failure;
it returns one of these frozen dataclasses inside Err. They pattern-match,
log, and flatten to a dict with stable keys via to_dict().

PapernetError
  ValidationError, IllegalTransitionError, IdentityNotFoundError,
  GatewayConnectionError, ChannelNotFoundError, SessionClosedError,
  DecodeError
  TransactionError (one per submit phase)
    EndorsementError, NoEndorsersError, CommitError, CommitTimeoutError
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import final

from papernet.core.types import UtcDatetime


def _flat(value: object) -> object:
    match value:
        case UtcDatetime(value=ts):
            return ts.isoformat()
        case tuple():
            return [_flat(item) for item in value]
        case FieldViolation():
            return {"path": value.path, "constraint": value.constraint, "actual_value": value.actual_value}
        case _:
            return value


@dataclass(frozen=True, slots=True)
class PapernetError:
    """Common fields of every error. Subclassed, so not @final."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> PapernetError:
        return dataclasses.replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        """Base keys first, then the subclass fields in declaration order."""
        return {f.name: _flat(getattr(self, f.name)) for f in dataclasses.fields(self)}


@final
@dataclass(frozen=True, slots=True)
class FieldViolation:
    path: str  # e.g. "peers.peer0.org2.example.com.url"
    constraint: str
    actual_value: str


@final
@dataclass(frozen=True, slots=True)
class ValidationError(PapernetError):
    """Input rejected before any network call; lists every offending field."""

    fields: tuple[FieldViolation, ...]


@final
@dataclass(frozen=True, slots=True)
class IllegalTransitionError(PapernetError):
    """Lifecycle move not in the transition table, or a state not reached after commit."""

    from_state: str
    to_state: str


@final
@dataclass(frozen=True, slots=True)
class IdentityNotFoundError(PapernetError):
    label: str


@final
@dataclass(frozen=True, slots=True)
class GatewayConnectionError(PapernetError):
    """No session: endpoint unreachable, TLS trust failed or identity refused."""

    endpoint: str
    cause: str


@final
@dataclass(frozen=True, slots=True)
class ChannelNotFoundError(PapernetError):
    channel: str


@final
@dataclass(frozen=True, slots=True)
class SessionClosedError(PapernetError):
    """A network or contract handle outlived its gateway session."""

    operation: str


@dataclass(frozen=True, slots=True)
class TransactionError(PapernetError):
    """A submit that did not end in a valid commit. Subclassed, so not @final."""

    transaction_id: str


@final
@dataclass(frozen=True, slots=True)
class EndorsementError(TransactionError):
    """The contract or the endorsement policy rejected the proposal."""

    reason: str


@final
@dataclass(frozen=True, slots=True)
class NoEndorsersError(TransactionError):
    """Connectivity, not a contract answer: no endorser could be reached."""

    channel: str


@final
@dataclass(frozen=True, slots=True)
class CommitError(TransactionError):
    """Ordered but invalidated, or refused by the orderer."""

    reason: str
    validation_code: str  # "MVCC_READ_CONFLICT", "SERVICE_UNAVAILABLE", ...


@final
@dataclass(frozen=True, slots=True)
class CommitTimeoutError(TransactionError):
    """No commit event in time. The transaction may still commit: query first."""

    timeout_s: float
    outcome: str = "AMBIGUOUS"


@final
@dataclass(frozen=True, slots=True)
class DecodeError(PapernetError):
    """Response payload is not a well-formed paper; field names the first bad key."""

    field: str
