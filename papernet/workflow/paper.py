"""Paper transaction orchestration: one session, one transaction, teardown.

submit_paper_transaction runs the strict chain identity -> connect ->
channel -> contract -> submit -> decode -> confirm. Each stage consumes
the previous stage's value; the first Err stops the chain and is
returned as a PhaseFailure. The gateway session is disconnected on every
exit path, including unexpected exceptions and cancellation.

A committed transaction is never resubmitted here. On CommitTimeoutError
the outcome is AMBIGUOUS and only a query can tell whether it landed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from papernet.core.errors import PapernetError
from papernet.core.result import Err, Ok
from papernet.gateway.gateway import Gateway
from papernet.gateway.profile import ConnectionProfile
from papernet.gateway.transport import LedgerTransport
from papernet.gateway.types import ConnectionOptions, DiscoveryOptions, GatewayTimeouts
from papernet.identity.wallet import Wallet, resolve_identity
from papernet.instrument.codec import decode_paper
from papernet.instrument.paper import CommercialPaper, confirm_state
from papernet.instrument.requests import (
    TransactionRequest,
    buy_request,
    get_paper_request,
    issue_request,
    redeem_request,
)
from papernet.workflow.types import InvocationTarget, Phase, PhaseFailure

logger = logging.getLogger(__name__)

type Progress = Callable[[str], None]


def _log_progress(line: str) -> None:
    logger.info("%s", line)


def _failed(phase: Phase, error: PapernetError) -> Err[PhaseFailure]:
    failure = PhaseFailure(phase=phase, error=error)
    logger.error("Paper transaction %s (%s)", failure.message, error.code)
    return Err(failure)


def _success_line(name: str, paper: CommercialPaper) -> str:
    head = f"{paper.issuer} commercial paper : {paper.paper_number}"
    match name:
        case "issue":
            return f"{head} successfully issued for value {paper.face_value}"
        case "buy":
            return f"{head} successfully purchased by {paper.owner}"
        case "redeem":
            return f"{head} successfully redeemed with {paper.owner}"
        case _:
            return f"{head} is {paper.state.name} and owned by {paper.owner}"


async def submit_paper_transaction(  # noqa: PLR0913
    transport: LedgerTransport,
    profile: ConnectionProfile,
    wallet: Wallet,
    target: InvocationTarget,
    request: TransactionRequest,
    *,
    discovery: DiscoveryOptions | None = None,
    timeouts: GatewayTimeouts | None = None,
    commit_timeout_s: float | None = None,
    progress: Progress = _log_progress,
) -> Ok[CommercialPaper] | Err[PhaseFailure]:
    """Run one paper transaction end to end and return the decoded paper.

    Requests with an expected_state are submitted (endorse, order, commit)
    and the result must show that state; requests without one are
    evaluated on a single peer. progress receives one line per step.
    """
    match resolve_identity(wallet, target.identity):
        case Err(error):
            return _failed(Phase.IDENTITY, error)
        case Ok():
            pass

    options = ConnectionOptions(
        identity=target.identity,
        wallet=wallet,
        discovery=discovery or DiscoveryOptions(),
        timeouts=timeouts or GatewayTimeouts(),
    )
    gateway = Gateway(transport)
    try:
        progress("Connect to Fabric gateway")
        match await gateway.connect(profile, options):
            case Err(error):
                return _failed(Phase.CONNECT, error)
            case Ok():
                pass

        progress(f"Use network channel: {target.channel}")
        match await gateway.get_network(target.channel):
            case Err(error):
                return _failed(Phase.CHANNEL, error)
            case Ok(network):
                pass

        progress(f"Use {target.contract_namespace or target.contract_name} smart contract")
        match network.get_contract(target.contract_name, target.contract_namespace):
            case Err(error):
                return _failed(Phase.CONTRACT, error)
            case Ok(contract):
                pass

        progress(f"Submit commercial paper {request.name} transaction")
        if request.expected_state is None:
            submitted = await contract.evaluate_transaction(request.name, *request.args)
        else:
            submitted = await contract.submit_transaction(
                request.name, *request.args, timeout=commit_timeout_s,
            )
        match submitted:
            case Err(error):
                return _failed(Phase.SUBMIT, error)
            case Ok(payload):
                pass

        progress(f"Process {request.name} transaction response")
        match decode_paper(payload):
            case Err(error):
                return _failed(Phase.DECODE, error)
            case Ok(paper):
                pass

        if request.expected_state is not None:
            match confirm_state(paper, request.expected_state):
                case Err(error):
                    return _failed(Phase.CONFIRM, error)
                case Ok():
                    pass

        progress(_success_line(request.name, paper))
        progress("Transaction complete!")
        return Ok(paper)
    except Exception:
        logger.exception("Unexpected failure during %s transaction", request.name)
        raise
    finally:
        progress("Disconnect from Fabric gateway")
        await gateway.disconnect()


# ---------------------------------------------------------------------------
# Lifecycle shortcuts
# ---------------------------------------------------------------------------


async def redeem_paper(  # noqa: PLR0913
    transport: LedgerTransport,
    profile: ConnectionProfile,
    wallet: Wallet,
    target: InvocationTarget,
    issuer: str,
    paper_number: str,
    redeeming_owner: str,
    redeeming_owner_msp: str,
    redeem_date: date | str,
    **kwargs: object,
) -> Ok[CommercialPaper] | Err[PhaseFailure]:
    """Redeem a paper; Ok only if the ledger shows it REDEEMED."""
    request = redeem_request(issuer, paper_number, redeeming_owner, redeeming_owner_msp, redeem_date)
    return await submit_paper_transaction(transport, profile, wallet, target, request, **kwargs)  # type: ignore[arg-type]


async def issue_paper(  # noqa: PLR0913
    transport: LedgerTransport,
    profile: ConnectionProfile,
    wallet: Wallet,
    target: InvocationTarget,
    issuer: str,
    paper_number: str,
    issue_date: date | str,
    maturity_date: date | str,
    face_value: object,
    **kwargs: object,
) -> Ok[CommercialPaper] | Err[PhaseFailure]:
    request = issue_request(issuer, paper_number, issue_date, maturity_date, str(face_value))
    return await submit_paper_transaction(transport, profile, wallet, target, request, **kwargs)  # type: ignore[arg-type]


async def buy_paper(  # noqa: PLR0913
    transport: LedgerTransport,
    profile: ConnectionProfile,
    wallet: Wallet,
    target: InvocationTarget,
    issuer: str,
    paper_number: str,
    current_owner: str,
    new_owner: str,
    new_owner_msp: str,
    price: object,
    purchase_date: date | str,
    **kwargs: object,
) -> Ok[CommercialPaper] | Err[PhaseFailure]:
    request = buy_request(
        issuer, paper_number, current_owner, new_owner, new_owner_msp, str(price), purchase_date,
    )
    return await submit_paper_transaction(transport, profile, wallet, target, request, **kwargs)  # type: ignore[arg-type]


async def query_paper(
    transport: LedgerTransport,
    profile: ConnectionProfile,
    wallet: Wallet,
    target: InvocationTarget,
    issuer: str,
    paper_number: str,
    **kwargs: object,
) -> Ok[CommercialPaper] | Err[PhaseFailure]:
    """Read the current paper from one peer; nothing is ordered."""
    request = get_paper_request(issuer, paper_number)
    return await submit_paper_transaction(transport, profile, wallet, target, request, **kwargs)  # type: ignore[arg-type]
