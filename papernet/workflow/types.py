"""Orchestration and Temporal activity data types.

All types: @final @dataclass(frozen=True, slots=True), so they cross the
Temporal activity boundary through PAPERNET_DATA_CONVERTER unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from papernet.core.errors import CommitTimeoutError, PapernetError
from papernet.instrument.paper import CommercialPaper
from papernet.instrument.requests import CONTRACT_NAME, CONTRACT_NAMESPACE, TransactionRequest

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Phase(Enum):
    """Where in the flow a failure happened, in execution order."""

    IDENTITY = "identity"
    CONNECT = "connect"
    CHANNEL = "channel"
    CONTRACT = "contract"
    SUBMIT = "submit"
    DECODE = "decode"
    CONFIRM = "confirm"


class TransactionOutcome(Enum):
    """Terminal states of one paper transaction.

    AMBIGUOUS: the commit wait timed out; the ledger may or may not hold
    the transaction, so the caller must query before resubmitting.
    """

    COMMITTED = "Committed"
    FAILED = "Failed"
    AMBIGUOUS = "Ambiguous"


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class InvocationTarget:
    """Who submits, on which channel, to which contract."""

    identity: str
    channel: str = "mychannel"
    contract_name: str = CONTRACT_NAME
    contract_namespace: str | None = CONTRACT_NAMESPACE


@final
@dataclass(frozen=True, slots=True)
class PhaseFailure:
    """A failure tagged with the phase that produced it."""

    phase: Phase
    error: PapernetError

    @property
    def message(self) -> str:
        return f"{self.phase.value} failed: {self.error.message}"

    @property
    def outcome(self) -> TransactionOutcome:
        if isinstance(self.error, CommitTimeoutError):
            return TransactionOutcome.AMBIGUOUS
        return TransactionOutcome.FAILED

    def to_dict(self) -> dict[str, object]:
        return {"phase": self.phase.value, **self.error.to_dict()}


# ---------------------------------------------------------------------------
# Activity I/O
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class PaperTransactionInput:
    """Input to the submit_paper_transaction activity."""

    target: InvocationTarget
    request: TransactionRequest
    commit_timeout_s: float | None = None


@final
@dataclass(frozen=True, slots=True)
class PaperTransactionOutput:
    """Committed paper, or the phase, code and message of the failure."""

    outcome: TransactionOutcome
    paper: CommercialPaper | None = None
    phase: Phase | None = None
    error_code: str | None = None
    error_message: str | None = None

    def __post_init__(self) -> None:
        committed = self.outcome is TransactionOutcome.COMMITTED
        if committed != (self.paper is not None):
            raise TypeError(
                "PaperTransactionOutput must carry a paper exactly when COMMITTED"
            )
        if committed == (self.phase is not None):
            raise TypeError(
                f"{self.outcome.value} outcome {'must not' if committed else 'must'} name a phase"
            )

    @staticmethod
    def committed(paper: CommercialPaper) -> PaperTransactionOutput:
        return PaperTransactionOutput(outcome=TransactionOutcome.COMMITTED, paper=paper)

    @staticmethod
    def failed(failure: PhaseFailure) -> PaperTransactionOutput:
        return PaperTransactionOutput(
            outcome=failure.outcome,
            phase=failure.phase,
            error_code=failure.error.code,
            error_message=failure.message,
        )
