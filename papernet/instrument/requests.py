"""Transaction wire contract of the commercial-paper contract.

Argument order and count are part of the contract; the client does not
check them; a mismatch is rejected by the contract at endorsement.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import final

from papernet.instrument.paper import PaperState

CONTRACT_NAME: str = "papercontract"
CONTRACT_NAMESPACE: str = "org.papernet.commercialcontract"


@final
@dataclass(frozen=True, slots=True)
class TransactionRequest:
    """A named transaction with ordered string arguments.

    expected_state is the lifecycle state the returned paper must show
    once the transaction has committed; None for queries.
    """

    name: str
    args: tuple[str, ...]
    expected_state: PaperState | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise TypeError("TransactionRequest.name must be non-empty")
        for i, arg in enumerate(self.args):
            if not isinstance(arg, str):
                raise TypeError(f"TransactionRequest.args[{i}] must be str, got {type(arg).__name__}")


def _wire_date(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else value


def issue_request(
    issuer: str,
    paper_number: str,
    issue_date: date | str,
    maturity_date: date | str,
    face_value: Decimal | int | str,
) -> TransactionRequest:
    return TransactionRequest(
        name="issue",
        args=(issuer, paper_number, _wire_date(issue_date), _wire_date(maturity_date),
              str(face_value)),
        expected_state=PaperState.ISSUED,
    )


def buy_request(
    issuer: str,
    paper_number: str,
    current_owner: str,
    new_owner: str,
    new_owner_msp: str,
    price: Decimal | int | str,
    purchase_date: date | str,
) -> TransactionRequest:
    return TransactionRequest(
        name="buy",
        args=(issuer, paper_number, current_owner, new_owner, new_owner_msp,
              str(price), _wire_date(purchase_date)),
        expected_state=PaperState.TRADING,
    )


def redeem_request(
    issuer: str,
    paper_number: str,
    redeeming_owner: str,
    redeeming_owner_msp: str,
    redeem_date: date | str,
) -> TransactionRequest:
    """``redeem`` with [issuer, paperNumber, redeemingOwner, redeemingOwnerMSP, redeemDate]."""
    return TransactionRequest(
        name="redeem",
        args=(issuer, paper_number, redeeming_owner, redeeming_owner_msp,
              _wire_date(redeem_date)),
        expected_state=PaperState.REDEEMED,
    )


def get_paper_request(issuer: str, paper_number: str) -> TransactionRequest:
    """Read-only query; evaluated on one peer, never ordered."""
    return TransactionRequest(name="getPaper", args=(issuer, paper_number))
