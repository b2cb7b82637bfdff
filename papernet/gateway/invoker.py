"""Transaction invoker — propose, endorse, order, wait for commit.

submit() is synchronous from the caller's point of view and multi-phase
inside. It never retries: resubmitting a financial transaction can apply
it twice, so retry is the caller's decision.
"""

from __future__ import annotations

import asyncio
import logging
import secrets

from papernet.core.errors import (
    CommitError,
    CommitTimeoutError,
    EndorsementError,
    GatewayConnectionError,
    NoEndorsersError,
    TransactionError,
)
from papernet.core.result import Err, Ok
from papernet.core.types import TransactionId, UtcDatetime
from papernet.gateway.transport import (
    ChannelTopology,
    EndorsingPeer,
    LedgerTransport,
    Proposal,
    ProposalResponse,
    SignedProposal,
    TransactionEnvelope,
    ValidationCode,
)
from papernet.gateway.types import ContractRef, GatewayTimeouts
from papernet.identity.credentials import sign
from papernet.identity.wallet import Identity

logger = logging.getLogger(__name__)

_SOURCE = "gateway.invoker"


def build_proposal(
    identity: Identity,
    channel: str,
    contract: ContractRef,
    transaction_name: str,
    args: tuple[str, ...],
) -> SignedProposal:
    """Create and sign a proposal with a fresh nonce and transaction id."""
    nonce = secrets.token_bytes(24)
    creator = identity.msp_id.encode("utf-8") + identity.credentials.public_key_pem
    proposal = Proposal(
        transaction_id=TransactionId.derive(nonce, creator),
        channel=channel,
        contract=contract,
        transaction_name=transaction_name,
        args=args,
        creator_msp_id=identity.msp_id,
        creator_public_key_pem=identity.credentials.public_key_pem,
        nonce=nonce,
        timestamp=UtcDatetime.now(),
    )
    return SignedProposal(
        proposal=proposal,
        signature=sign(identity.credentials, proposal.signing_bytes()),
    )


async def _endorse_one(
    transport: LedgerTransport,
    peer: EndorsingPeer,
    signed: SignedProposal,
    timeout_s: float,
) -> Ok[ProposalResponse] | Err[GatewayConnectionError]:
    try:
        async with asyncio.timeout(timeout_s):
            return await transport.endorse(peer, signed)
    except TimeoutError:
        return Err(GatewayConnectionError(
            message=f"Endorsement request to {peer.name} timed out after {timeout_s}s",
            code="ENDORSE_TIMEOUT",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}._endorse_one",
            endpoint=peer.url,
            cause="timeout",
        ))


def _endorsement_error(tx_id: str, reason: str) -> Err[EndorsementError]:
    return Err(EndorsementError(
        message=f"Transaction {tx_id[:12]} was not endorsed: {reason}",
        code="ENDORSEMENT_FAILURE",
        timestamp=UtcDatetime.now(),
        source=f"{_SOURCE}.endorse",
        transaction_id=tx_id,
        reason=reason,
    ))


async def endorse(
    transport: LedgerTransport,
    topology: ChannelTopology,
    signed: SignedProposal,
    timeouts: GatewayTimeouts,
) -> Ok[tuple[ProposalResponse, ...]] | Err[TransactionError]:
    """Gather endorsements from one peer per organisation, concurrently.

    Every reached peer must endorse, every organisation must be reached,
    and all endorsements must carry the same response payload.
    """
    tx_id = signed.proposal.transaction_id.value
    peers = topology.endorsing_set()
    results = await asyncio.gather(*(
        _endorse_one(transport, p, signed, timeouts.endorse_timeout_s) for p in peers
    ))

    responses: list[ProposalResponse] = []
    unreachable: list[str] = []
    for peer, result in zip(peers, results, strict=True):
        match result:
            case Ok(response):
                responses.append(response)
            case Err(error):
                logger.warning("Endorser %s unreachable: %s", peer.name, error.cause)
                unreachable.append(peer.name)

    if not responses:
        return Err(NoEndorsersError(
            message=f"No endorsing peer reachable on channel {topology.channel!r}",
            code="NO_ENDORSERS",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}.endorse",
            transaction_id=tx_id,
            channel=topology.channel,
        ))
    rejected = [r for r in responses if not r.endorsed]
    if rejected:
        return _endorsement_error(tx_id, rejected[0].message or f"status {rejected[0].status}")
    if unreachable:
        return _endorsement_error(
            tx_id, f"endorsement policy not satisfied, unreachable: {', '.join(unreachable)}",
        )
    if len({(r.payload, r.read_write_set) for r in responses}) > 1:
        return _endorsement_error(tx_id, "endorsement payload mismatch between peers")
    return Ok(tuple(responses))


async def submit(
    transport: LedgerTransport,
    identity: Identity,
    topology: ChannelTopology,
    contract: ContractRef,
    transaction_name: str,
    args: tuple[str, ...],
    timeouts: GatewayTimeouts,
    commit_timeout_s: float | None = None,
) -> Ok[bytes] | Err[TransactionError]:
    """Run all four phases and return the contract's response payload."""
    signed = build_proposal(identity, topology.channel, contract, transaction_name, args)
    tx_id = signed.proposal.transaction_id.value
    logger.info(
        "Submitting %s on %s/%s as %s (tx %s)",
        transaction_name, topology.channel, contract, identity.label, tx_id[:12],
    )

    match await endorse(transport, topology, signed, timeouts):
        case Err() as e:
            return e
        case Ok(responses):
            pass

    envelope = TransactionEnvelope(proposal=signed, endorsements=responses)
    match await transport.order(envelope):
        case Err() as e:
            return e
        case Ok():
            pass

    wait_s = commit_timeout_s if commit_timeout_s is not None else timeouts.commit_timeout_s
    try:
        async with asyncio.timeout(wait_s):
            status_result = await transport.wait_for_commit(topology.channel, tx_id)
    except TimeoutError:
        logger.error("Commit of tx %s not confirmed within %ss; outcome unknown", tx_id[:12], wait_s)
        return Err(CommitTimeoutError(
            message=(
                f"Transaction {tx_id[:12]} not confirmed within {wait_s}s; "
                "it may still commit"
            ),
            code="COMMIT_TIMEOUT",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}.submit",
            transaction_id=tx_id,
            timeout_s=wait_s,
        ))

    match status_result:
        case Err() as e:
            return e
        case Ok(status) if status.code is not ValidationCode.VALID:
            return Err(CommitError(
                message=f"Transaction {tx_id[:12]} committed as invalid: {status.code.value}",
                code="COMMIT_FAILURE",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.submit",
                transaction_id=tx_id,
                reason=f"invalidated in block {status.block_number}",
                validation_code=status.code.value,
            ))
        case Ok(status):
            logger.info("Transaction %s committed in block %d", tx_id[:12], status.block_number)
            return Ok(responses[0].payload)


async def evaluate(
    transport: LedgerTransport,
    identity: Identity,
    topology: ChannelTopology,
    contract: ContractRef,
    transaction_name: str,
    args: tuple[str, ...],
    timeouts: GatewayTimeouts,
) -> Ok[bytes] | Err[TransactionError]:
    """Query on a single peer, own organisation first. Nothing is ordered."""
    signed = build_proposal(identity, topology.channel, contract, transaction_name, args)
    tx_id = signed.proposal.transaction_id.value
    own = topology.peers_of(identity.msp_id)
    candidates = own + tuple(p for p in topology.peers if p not in own)
    for peer in candidates:
        match await _endorse_one(transport, peer, signed, timeouts.endorse_timeout_s):
            case Err(error):
                logger.warning("Query peer %s unreachable: %s", peer.name, error.cause)
            case Ok(response) if not response.endorsed:
                return _endorsement_error(tx_id, response.message or f"status {response.status}")
            case Ok(response):
                return Ok(response.payload)
    return Err(NoEndorsersError(
        message=f"No peer reachable to evaluate {transaction_name!r} on {topology.channel!r}",
        code="NO_ENDORSERS",
        timestamp=UtcDatetime.now(),
        source=f"{_SOURCE}.evaluate",
        transaction_id=tx_id,
        channel=topology.channel,
    ))
