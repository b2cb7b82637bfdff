"""Commercial paper codec — contract payload bytes <-> CommercialPaper.

decode_paper is strict: a required field that is missing, empty or of the
wrong type is a DecodeError naming that field. Nothing is defaulted;
issuer, owner and state are what an operator is shown as proof of the
transaction's effect.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil.parser import isoparse

from papernet.core.errors import DecodeError
from papernet.core.result import Err, Ok
from papernet.core.serialization import canonical_bytes
from papernet.core.types import UtcDatetime
from papernet.instrument.paper import PAPER_CLASS, CommercialPaper, PaperState, make_key

PAYLOAD_FIELD = "<payload>"


def _decode_error(field: str, detail: str) -> Err[DecodeError]:
    return Err(DecodeError(
        message=f"Cannot decode commercial paper: {detail}",
        code="DECODE_ERROR",
        timestamp=UtcDatetime.now(),
        source="instrument.codec.decode_paper",
        field=field,
    ))


def _required_str(raw: dict[str, Any], key: str) -> Ok[str] | Err[DecodeError]:
    val = raw.get(key)
    if val is None:
        return _decode_error(key, f"missing required field {key!r}")
    if not isinstance(val, str) or not val:
        return _decode_error(key, f"{key!r} must be a non-empty string, got {val!r}")
    return Ok(val)


def _required_date(raw: dict[str, Any], key: str) -> Ok[date] | Err[DecodeError]:
    match _required_str(raw, key):
        case Err() as e:
            return e
        case Ok(text):
            pass
    try:
        return Ok(isoparse(text).date())
    except ValueError:
        return _decode_error(key, f"{key!r} is not an ISO-8601 date: {text!r}")


def _optional_date(raw: dict[str, Any], key: str) -> Ok[date | None] | Err[DecodeError]:
    if raw.get(key) is None:
        return Ok(None)
    return _required_date(raw, key)


def _state(raw: dict[str, Any]) -> Ok[PaperState] | Err[DecodeError]:
    val = raw.get("currentState")
    if val is None:
        return _decode_error("currentState", "missing required field 'currentState'")
    # bool is an int subclass; True must not decode as ISSUED
    if isinstance(val, bool) or not isinstance(val, int):
        return _decode_error("currentState", f"'currentState' must be an integer, got {val!r}")
    try:
        return Ok(PaperState(val))
    except ValueError:
        return _decode_error("currentState", f"unknown lifecycle state {val}")


def _face_value(raw: dict[str, Any]) -> Ok[Decimal] | Err[DecodeError]:
    val = raw.get("faceValue")
    if val is None:
        return _decode_error("faceValue", "missing required field 'faceValue'")
    if isinstance(val, bool) or not isinstance(val, (int, str)):
        return _decode_error("faceValue", f"'faceValue' must be a string or integer, got {val!r}")
    try:
        amount = Decimal(str(val))
    except InvalidOperation:
        return _decode_error("faceValue", f"'faceValue' is not numeric: {val!r}")
    if not amount.is_finite():
        return _decode_error("faceValue", f"'faceValue' must be finite, got {val!r}")
    return Ok(amount)


def decode_paper(payload: bytes) -> Ok[CommercialPaper] | Err[DecodeError]:  # noqa: PLR0911
    """Decode a committed contract response into a CommercialPaper.

    A truncated or otherwise unparseable payload is a DecodeError on
    ``<payload>``; the paper is never partially populated.
    """
    if not isinstance(payload, (bytes, bytearray)):
        return _decode_error(PAYLOAD_FIELD, f"expected bytes, got {type(payload).__name__}")
    if not payload:
        return _decode_error(PAYLOAD_FIELD, "empty response payload")
    try:
        raw = json.loads(bytes(payload).decode("utf-8"))
    except (ValueError, RecursionError) as e:
        return _decode_error(PAYLOAD_FIELD, f"payload is not a complete JSON document ({e})")
    if not isinstance(raw, dict):
        return _decode_error(PAYLOAD_FIELD, f"expected a JSON object, got {type(raw).__name__}")

    cls = raw.get("class")
    if cls is not None and cls != PAPER_CLASS:
        return _decode_error("class", f"expected {PAPER_CLASS!r}, got {cls!r}")

    # Canonical field order: the first failure is reported.
    match _required_str(raw, "issuer"):
        case Err() as e:
            return e
        case Ok(issuer):
            pass
    match _required_str(raw, "paperNumber"):
        case Err() as e:
            return e
        case Ok(paper_number):
            pass
    match _required_str(raw, "owner"):
        case Err() as e:
            return e
        case Ok(owner):
            pass
    match _state(raw):
        case Err() as e:
            return e
        case Ok(state):
            pass
    match _required_date(raw, "issueDateTime"):
        case Err() as e:
            return e
        case Ok(issue_date):
            pass
    match _required_date(raw, "maturityDateTime"):
        case Err() as e:
            return e
        case Ok(maturity_date):
            pass
    match _face_value(raw):
        case Err() as e:
            return e
        case Ok(face_value):
            pass
    match _optional_date(raw, "redeemDateTime"):
        case Err() as e:
            return e
        case Ok(redeem_date):
            pass

    owner_msp = raw.get("mspid")
    if owner_msp is not None and (not isinstance(owner_msp, str) or not owner_msp):
        return _decode_error("mspid", f"'mspid' must be a non-empty string, got {owner_msp!r}")

    key = raw.get("key")
    if key is not None and key != make_key(issuer, paper_number):
        return _decode_error(
            "key", f"key {key!r} does not match {make_key(issuer, paper_number)!r}",
        )

    return Ok(CommercialPaper(
        issuer=issuer,
        paper_number=paper_number,
        owner=owner,
        issue_date=issue_date,
        maturity_date=maturity_date,
        face_value=face_value,
        state=state,
        owner_msp=owner_msp,
        redeem_date=redeem_date,
    ))


def paper_to_record(paper: CommercialPaper) -> dict[str, Any]:
    """Contract-side record of a paper (the inverse of decode_paper)."""
    record: dict[str, Any] = {
        "class": PAPER_CLASS,
        "key": paper.key,
        "currentState": paper.state.value,
        "issuer": paper.issuer,
        "paperNumber": paper.paper_number,
        "issueDateTime": paper.issue_date.isoformat(),
        "maturityDateTime": paper.maturity_date.isoformat(),
        "faceValue": str(paper.face_value),
        "owner": paper.owner,
    }
    if paper.owner_msp is not None:
        record["mspid"] = paper.owner_msp
    if paper.redeem_date is not None:
        record["redeemDateTime"] = paper.redeem_date.isoformat()
    return record


def encode_paper(paper: CommercialPaper) -> bytes:
    """Canonical JSON bytes of paper_to_record(paper)."""
    # A record holds only str/int values, so canonical_bytes cannot fail here.
    return canonical_bytes(paper_to_record(paper)).unwrap()
