"""Commercial paper state model and lifecycle transitions.

PAPER_TRANSITIONS lists the edges the ledger contract permits:
ISSUED -> TRADING (buy), TRADING -> TRADING (re-sale),
ISSUED/TRADING -> REDEEMED. The ledger enforces them; the client uses the
table only to confirm that a committed result shows the expected move.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import final

from papernet.core.errors import IllegalTransitionError
from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime

PAPER_CLASS: str = "org.papernet.commercialpaper"


class PaperState(Enum):
    """Lifecycle stage. Values are the contract's wire integers."""

    ISSUED = 1
    TRADING = 2
    REDEEMED = 3


type TransitionTable = frozenset[tuple[PaperState, PaperState]]

PAPER_TRANSITIONS: TransitionTable = frozenset({
    (PaperState.ISSUED, PaperState.TRADING),
    (PaperState.TRADING, PaperState.TRADING),
    (PaperState.ISSUED, PaperState.REDEEMED),
    (PaperState.TRADING, PaperState.REDEEMED),
})


def make_key(issuer: str, paper_number: str) -> str:
    """Ledger key of a paper: ``issuer:paperNumber``."""
    return f"{issuer}:{paper_number}"


@final
@dataclass(frozen=True, slots=True)
class CommercialPaper:
    """Decoded ledger view of one commercial paper."""

    issuer: str
    paper_number: str
    owner: str
    issue_date: date
    maturity_date: date
    face_value: Decimal
    state: PaperState
    owner_msp: str | None = None
    redeem_date: date | None = None

    def __post_init__(self) -> None:
        for name in ("issuer", "paper_number", "owner"):
            if not getattr(self, name):
                raise TypeError(f"CommercialPaper.{name} must be non-empty")

    @property
    def key(self) -> str:
        return make_key(self.issuer, self.paper_number)

    @property
    def is_redeemed(self) -> bool:
        return self.state is PaperState.REDEEMED


def check_transition(
    from_state: PaperState,
    to_state: PaperState,
    transitions: TransitionTable = PAPER_TRANSITIONS,
) -> Ok[None] | Err[IllegalTransitionError]:
    """Validate a paper state transition against a transition table."""
    if (from_state, to_state) in transitions:
        return Ok(None)
    return Err(IllegalTransitionError(
        message=f"Invalid paper transition: {from_state.name} -> {to_state.name}",
        code="ILLEGAL_TRANSITION",
        timestamp=UtcDatetime.now(),
        source="instrument.paper.check_transition",
        from_state=from_state.name,
        to_state=to_state.name,
    ))


def confirm_state(
    paper: CommercialPaper, expected: PaperState,
) -> Ok[CommercialPaper] | Err[IllegalTransitionError]:
    """Check that the committed paper actually reached the expected state."""
    if paper.state is expected:
        return Ok(paper)
    return Err(IllegalTransitionError(
        message=(
            f"Paper {paper.key} is {paper.state.name} after commit, "
            f"expected {expected.name}"
        ),
        code="STATE_NOT_REACHED",
        timestamp=UtcDatetime.now(),
        source="instrument.paper.confirm_state",
        from_state=paper.state.name,
        to_state=expected.name,
    ))
