"""In-memory commercial paper contract, run by the in-memory peers.

Mirrors the ledger-side rules the client relies on but never checks
itself: argument arity, paper existence, ownership and the lifecycle
transition table. Functions are pure over a state snapshot and return
Ok(ChaincodeResult) or Err(reason); a reason becomes a rejected
endorsement.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import final

from dateutil.parser import isoparse

from papernet.core.result import Err, Ok
from papernet.gateway.transport import ReadWriteSet
from papernet.instrument.codec import decode_paper, encode_paper
from papernet.instrument.paper import CommercialPaper, PaperState, check_transition, make_key
from papernet.instrument.requests import CONTRACT_NAMESPACE

type WorldState = Mapping[str, tuple[bytes, int]]


@final
@dataclass(frozen=True, slots=True)
class InvocationContext:
    """Who is invoking, as the peer sees it."""

    channel: str
    creator_msp_id: str
    transaction_id: str


@final
@dataclass(frozen=True, slots=True)
class ChaincodeResult:
    payload: bytes
    read_write_set: ReadWriteSet


type Handler = Callable[
    [WorldState, InvocationContext, tuple[str, ...]], Ok[ChaincodeResult] | Err[str],
]


def _parse_date(raw: str, name: str) -> Ok[date] | Err[str]:
    try:
        return Ok(isoparse(raw).date())
    except ValueError:
        return Err(f"{name} must be an ISO-8601 date, got {raw!r}")


def _require_non_empty(**values: str) -> Ok[None] | Err[str]:
    for name, value in values.items():
        if not value:
            return Err(f"{name} must be non-empty")
    return Ok(None)


def _load(state: WorldState, issuer: str, paper_number: str) -> Ok[tuple[CommercialPaper, int]] | Err[str]:
    key = make_key(issuer, paper_number)
    entry = state.get(key)
    if entry is None:
        return Err(f"Paper {issuer}{paper_number} does not exist")
    raw, version = entry
    match decode_paper(raw):
        case Err(e):
            return Err(f"Stored paper {key} is corrupt: {e.message}")
        case Ok(paper):
            return Ok((paper, version))


def _store(paper: CommercialPaper, read_version: int | None) -> ChaincodeResult:
    payload = encode_paper(paper)
    reads = () if read_version is None else ((paper.key, read_version),)
    return ChaincodeResult(
        payload=payload,
        read_write_set=ReadWriteSet(reads=reads, writes=((paper.key, payload),)),
    )


def issue(
    state: WorldState, ctx: InvocationContext, args: tuple[str, ...],
) -> Ok[ChaincodeResult] | Err[str]:
    """issue(issuer, paperNumber, issueDateTime, maturityDateTime, faceValue)."""
    issuer, paper_number, issue_raw, maturity_raw, face_raw = args
    match _require_non_empty(issuer=issuer, paperNumber=paper_number):
        case Err() as e:
            return e
        case Ok():
            pass
    if make_key(issuer, paper_number) in state:
        return Err(f"Paper {issuer}{paper_number} already exists")
    match _parse_date(issue_raw, "issueDateTime"):
        case Err() as e:
            return e
        case Ok(issue_date):
            pass
    match _parse_date(maturity_raw, "maturityDateTime"):
        case Err() as e:
            return e
        case Ok(maturity_date):
            pass
    if maturity_date <= issue_date:
        return Err("maturityDateTime must be after issueDateTime")
    try:
        face_value = Decimal(face_raw)
    except InvalidOperation:
        return Err(f"faceValue must be numeric, got {face_raw!r}")
    if not face_value.is_finite() or face_value <= 0:
        return Err(f"faceValue must be > 0, got {face_raw!r}")
    paper = CommercialPaper(
        issuer=issuer,
        paper_number=paper_number,
        owner=issuer,
        issue_date=issue_date,
        maturity_date=maturity_date,
        face_value=face_value,
        state=PaperState.ISSUED,
        owner_msp=ctx.creator_msp_id,
    )
    return Ok(_store(paper, None))


def buy(
    state: WorldState, ctx: InvocationContext, args: tuple[str, ...],  # noqa: ARG001
) -> Ok[ChaincodeResult] | Err[str]:
    """buy(issuer, paperNumber, currentOwner, newOwner, newOwnerMSP, price, purchaseDateTime)."""
    issuer, paper_number, current_owner, new_owner, new_owner_msp, _price, purchased = args
    match _require_non_empty(newOwner=new_owner, newOwnerMSP=new_owner_msp):
        case Err() as e:
            return e
        case Ok():
            pass
    match _load(state, issuer, paper_number):
        case Err() as e:
            return e
        case Ok((paper, version)):
            pass
    if paper.owner != current_owner:
        return Err(f"Paper {issuer}{paper_number} is not owned by {current_owner}")
    match check_transition(paper.state, PaperState.TRADING):
        case Err(e):
            return Err(f"Paper {issuer}{paper_number} cannot be bought: {e.message}")
        case Ok():
            pass
    match _parse_date(purchased, "purchaseDateTime"):
        case Err() as e:
            return e
        case Ok():
            pass
    return Ok(_store(
        replace(paper, owner=new_owner, owner_msp=new_owner_msp, state=PaperState.TRADING),
        version,
    ))


def redeem(
    state: WorldState, ctx: InvocationContext, args: tuple[str, ...],
) -> Ok[ChaincodeResult] | Err[str]:
    """redeem(issuer, paperNumber, redeemingOwner, redeemingOwnerMSP, redeemDateTime)."""
    issuer, paper_number, redeeming_owner, redeeming_owner_msp, redeemed = args
    match _load(state, issuer, paper_number):
        case Err() as e:
            return e
        case Ok((paper, version)):
            pass
    if paper.is_redeemed:
        return Err(f"Paper {issuer}{paper_number} has already been redeemed")
    if paper.owner_msp != ctx.creator_msp_id:
        return Err(
            f"Paper {issuer}{paper_number} cannot be redeemed by {ctx.creator_msp_id}, "
            "as it is not the authorised owning organisation"
        )
    if paper.owner != redeeming_owner or paper.owner_msp != redeeming_owner_msp:
        return Err(
            f"Redeeming owner {redeeming_owner} ({redeeming_owner_msp}) does not "
            f"currently own paper {issuer}{paper_number}"
        )
    match check_transition(paper.state, PaperState.REDEEMED):
        case Err(e):
            return Err(e.message)
        case Ok():
            pass
    match _parse_date(redeemed, "redeemDateTime"):
        case Err() as e:
            return e
        case Ok(redeem_date):
            pass
    return Ok(_store(replace(paper, state=PaperState.REDEEMED, redeem_date=redeem_date), version))


def get_paper(
    state: WorldState, ctx: InvocationContext, args: tuple[str, ...],  # noqa: ARG001
) -> Ok[ChaincodeResult] | Err[str]:
    """getPaper(issuer, paperNumber), read only."""
    issuer, paper_number = args
    match _load(state, issuer, paper_number):
        case Err() as e:
            return e
        case Ok((paper, version)):
            return Ok(ChaincodeResult(
                payload=state[paper.key][0],
                read_write_set=ReadWriteSet(reads=((paper.key, version),)),
            ))


# name -> (arity, handler)
PAPER_CONTRACT: dict[str, tuple[int, Handler]] = {
    "issue": (5, issue),
    "buy": (7, buy),
    "redeem": (5, redeem),
    "getPaper": (2, get_paper),
}


@final
@dataclass(frozen=True, slots=True)
class PaperChaincode:
    """Dispatches ``namespace:transaction`` names to the paper contract."""

    namespace: str = CONTRACT_NAMESPACE

    def invoke(
        self,
        state: WorldState,
        ctx: InvocationContext,
        qualified_name: str,
        args: tuple[str, ...],
    ) -> Ok[ChaincodeResult] | Err[str]:
        namespace, sep, name = qualified_name.rpartition(":")
        if sep and namespace != self.namespace:
            return Err(f"Contract namespace {namespace!r} is not defined in this chaincode")
        entry = PAPER_CONTRACT.get(name)
        if entry is None:
            return Err(f"You've asked to invoke a function that does not exist: {name}")
        arity, handler = entry
        if len(args) != arity:
            return Err(f"Expected {arity} parameters for {name}, but received {len(args)}")
        return handler(state, ctx, args)
