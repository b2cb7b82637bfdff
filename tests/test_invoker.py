"""Tests for papernet.gateway.invoker — endorse, order and commit-wait phases."""

from __future__ import annotations

import asyncio

import pytest

from papernet.core.errors import (
    CommitError,
    CommitTimeoutError,
    EndorsementError,
    GatewayConnectionError,
    NoEndorsersError,
)
from papernet.core.result import Err, Ok, unwrap
from papernet.core.types import TransactionId
from papernet.gateway import invoker
from papernet.gateway.gateway import Contract, Gateway
from papernet.gateway.transport import (
    ChannelTopology,
    EndorsingPeer,
    ProposalResponse,
    ReadWriteSet,
    SignedProposal,
    ValidationCode,
)
from papernet.gateway.types import ConnectionOptions, ContractRef, GatewayTimeouts
from papernet.identity.credentials import verify
from papernet.infra.sandbox import Sandbox
from papernet.instrument.codec import decode_paper
from papernet.instrument.paper import PaperState

_REDEEM_ARGS = ("MagnetoCorp", "00001", "DigiBank", "Org2MSP", "2020-11-30")
_REF = ContractRef(name="papercontract", namespace="org.papernet.commercialcontract")
_TIMEOUTS = GatewayTimeouts(endorse_timeout_s=0.05, commit_timeout_s=5.0)


async def _contract(sandbox: Sandbox, identity: str = "balaji") -> tuple[Gateway, Contract]:
    gateway = Gateway(sandbox.network.transport())
    unwrap(await gateway.connect(sandbox.profile, ConnectionOptions(
        identity=identity,
        wallet=sandbox.wallet,
        timeouts=GatewayTimeouts(endorse_timeout_s=5.0, commit_timeout_s=5.0),
    )))
    network = unwrap(await gateway.get_network("mychannel"))
    return gateway, unwrap(network.get_contract(_REF.name, _REF.namespace))


def _stored_state(sandbox: Sandbox) -> PaperState:
    raw = sandbox.network.channels["mychannel"].get("MagnetoCorp:00001")
    assert raw is not None
    return unwrap(decode_paper(raw)).state


_TOPOLOGY = ChannelTopology(channel="mychannel", peers=(
    EndorsingPeer(name="p1", msp_id="Org1MSP", url="grpc://localhost:7051"),
    EndorsingPeer(name="p2", msp_id="Org2MSP", url="grpc://localhost:9051"),
))


class _ScriptedTransport:
    """Endorsement-only transport: each peer answers what the script says."""

    def __init__(self, answers: dict[str, bytes | None], delay_s: float = 0.0) -> None:
        self._answers = answers
        self._delay_s = delay_s

    async def endorse(self, peer: EndorsingPeer, proposal: SignedProposal):  # type: ignore[no-untyped-def]
        await asyncio.sleep(self._delay_s)
        payload = self._answers[peer.name]
        if payload is None:
            return Err(GatewayConnectionError(
                message="down", code="X", timestamp=proposal.proposal.timestamp,
                source="tests", endpoint=peer.url, cause="down",
            ))
        return Ok(ProposalResponse(peer=peer.name, status=200, payload=payload))


# ---------------------------------------------------------------------------
# Proposal
# ---------------------------------------------------------------------------


class TestBuildProposal:
    def test_signed_by_creator(self, sandbox: Sandbox) -> None:
        identity = unwrap(sandbox.wallet.get("balaji"))
        signed = invoker.build_proposal(identity, "mychannel", _REF, "redeem", _REDEEM_ARGS)
        p = signed.proposal
        assert p.creator_msp_id == "Org2MSP"
        assert p.qualified_name == "org.papernet.commercialcontract:redeem"
        assert verify(identity.credentials.public_key_pem, p.signing_bytes(), signed.signature)

    def test_transaction_id_from_nonce_and_creator(self, sandbox: Sandbox) -> None:
        identity = unwrap(sandbox.wallet.get("balaji"))
        p = invoker.build_proposal(identity, "mychannel", _REF, "redeem", _REDEEM_ARGS).proposal
        creator = b"Org2MSP" + identity.credentials.public_key_pem
        assert p.transaction_id == TransactionId.derive(p.nonce, creator)

    def test_fresh_nonce_each_time(self, sandbox: Sandbox) -> None:
        identity = unwrap(sandbox.wallet.get("balaji"))
        a = invoker.build_proposal(identity, "mychannel", _REF, "redeem", _REDEEM_ARGS).proposal
        b = invoker.build_proposal(identity, "mychannel", _REF, "redeem", _REDEEM_ARGS).proposal
        assert a.transaction_id != b.transaction_id


# ---------------------------------------------------------------------------
# Endorsement
# ---------------------------------------------------------------------------


class TestEndorse:
    @pytest.mark.asyncio
    async def test_matching_endorsements(self, sandbox: Sandbox) -> None:
        signed = invoker.build_proposal(
            unwrap(sandbox.wallet.get("balaji")), "mychannel", _REF, "redeem", _REDEEM_ARGS,
        )
        transport = _ScriptedTransport({"p1": b"same", "p2": b"same"})
        responses = unwrap(await invoker.endorse(transport, _TOPOLOGY, signed, _TIMEOUTS))  # type: ignore[arg-type]
        assert [r.peer for r in responses] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_payload_mismatch(self, sandbox: Sandbox) -> None:
        signed = invoker.build_proposal(
            unwrap(sandbox.wallet.get("balaji")), "mychannel", _REF, "redeem", _REDEEM_ARGS,
        )
        transport = _ScriptedTransport({"p1": b"one", "p2": b"two"})
        result = await invoker.endorse(transport, _TOPOLOGY, signed, _TIMEOUTS)  # type: ignore[arg-type]
        assert isinstance(result, Err)
        assert isinstance(result.error, EndorsementError)
        assert "mismatch" in result.error.reason

    @pytest.mark.asyncio
    async def test_partial_reachability_fails_policy(self, sandbox: Sandbox) -> None:
        signed = invoker.build_proposal(
            unwrap(sandbox.wallet.get("balaji")), "mychannel", _REF, "redeem", _REDEEM_ARGS,
        )
        transport = _ScriptedTransport({"p1": None, "p2": b"ok"})
        result = await invoker.endorse(transport, _TOPOLOGY, signed, _TIMEOUTS)  # type: ignore[arg-type]
        assert isinstance(result, Err)
        assert isinstance(result.error, EndorsementError)
        assert "p1" in result.error.reason

    @pytest.mark.asyncio
    async def test_slow_endorsers_time_out(self, sandbox: Sandbox) -> None:
        signed = invoker.build_proposal(
            unwrap(sandbox.wallet.get("balaji")), "mychannel", _REF, "redeem", _REDEEM_ARGS,
        )
        transport = _ScriptedTransport({"p1": b"ok", "p2": b"ok"}, delay_s=1.0)
        result = await invoker.endorse(transport, _TOPOLOGY, signed, _TIMEOUTS)  # type: ignore[arg-type]
        assert isinstance(result, Err)
        assert isinstance(result.error, NoEndorsersError)
        assert result.error.channel == "mychannel"


# ---------------------------------------------------------------------------
# Submit against the sandbox network
# ---------------------------------------------------------------------------


class TestSubmit:
    @pytest.mark.asyncio
    async def test_redeem_commits(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        payload = unwrap(await contract.submit_transaction("redeem", *_REDEEM_ARGS))
        paper = unwrap(decode_paper(payload))
        assert paper.state is PaperState.REDEEMED
        assert paper.owner == "DigiBank"
        assert _stored_state(sandbox) is PaperState.REDEEMED
        assert len(sandbox.network.submitted) == 1
        assert len(sandbox.network.submitted[0].endorsements) == 2
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_wrong_arity_is_endorsement_failure(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS[:4])
        assert isinstance(result, Err)
        assert isinstance(result.error, EndorsementError)
        assert result.error.reason == "Expected 5 parameters for redeem, but received 4"
        assert sandbox.network.submitted == []
        assert _stored_state(sandbox) is PaperState.TRADING
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_unknown_function(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        result = await contract.submit_transaction("burn", "MagnetoCorp", "00001")
        assert isinstance(result, Err)
        assert "does not exist" in result.error.reason
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_second_redeem_rejected(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        unwrap(await contract.submit_transaction("redeem", *_REDEEM_ARGS))
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS)
        assert isinstance(result, Err)
        assert isinstance(result.error, EndorsementError)
        assert "already been redeemed" in result.error.reason
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_wrong_organisation_cannot_redeem(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox, identity="isabella")
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS)
        assert isinstance(result, Err)
        assert "authorised owning organisation" in result.error.reason
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_endorser_down_after_connect(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        sandbox.network.set_reachable("peer0.org1.example.com", False)
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS)
        assert isinstance(result, Err)
        assert isinstance(result.error, EndorsementError)
        assert "policy not satisfied" in result.error.reason
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_no_endorsers(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        for peer in ("peer0.org1.example.com", "peer0.org2.example.com"):
            sandbox.network.set_reachable(peer, False)
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS)
        assert isinstance(result, Err)
        assert isinstance(result.error, NoEndorsersError)
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_mvcc_conflict(self, sandbox: Sandbox) -> None:
        sandbox.network.force_validation_code = ValidationCode.MVCC_READ_CONFLICT
        gateway, contract = await _contract(sandbox)
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS)
        assert isinstance(result, Err)
        assert isinstance(result.error, CommitError)
        assert result.error.validation_code == "MVCC_READ_CONFLICT"
        assert _stored_state(sandbox) is PaperState.TRADING
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_orderer_unavailable(self, sandbox: Sandbox) -> None:
        sandbox.network.orderer_available = False
        gateway, contract = await _contract(sandbox)
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS)
        assert isinstance(result, Err)
        assert isinstance(result.error, CommitError)
        assert result.error.validation_code == "SERVICE_UNAVAILABLE"
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_commit_timeout_is_ambiguous(self, sandbox: Sandbox) -> None:
        sandbox.network.commit_delay_s = 1.0
        gateway, contract = await _contract(sandbox)
        result = await contract.submit_transaction("redeem", *_REDEEM_ARGS, timeout=0.05)
        assert isinstance(result, Err)
        assert isinstance(result.error, CommitTimeoutError)
        assert result.error.outcome == "AMBIGUOUS"
        assert result.error.timeout_s == 0.05
        # The ledger did commit; only the confirmation was lost.
        assert _stored_state(sandbox) is PaperState.REDEEMED
        await gateway.disconnect()
        assert sandbox.network.close_count == 1


# ---------------------------------------------------------------------------
# Evaluate
# ---------------------------------------------------------------------------


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_query_is_not_ordered(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        paper = unwrap(decode_paper(unwrap(
            await contract.evaluate_transaction("getPaper", "MagnetoCorp", "00001"),
        )))
        assert paper.state is PaperState.TRADING
        assert sandbox.network.submitted == []
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_falls_back_to_other_org(self, sandbox: Sandbox) -> None:
        gateway, contract = await _contract(sandbox)
        sandbox.network.set_reachable("peer0.org2.example.com", False)
        assert isinstance(await contract.evaluate_transaction("getPaper", "MagnetoCorp", "00001"), Ok)
        await gateway.disconnect()

    @pytest.mark.asyncio
    async def test_missing_paper(self, empty_sandbox: Sandbox) -> None:
        gateway, contract = await _contract(empty_sandbox)
        result = await contract.evaluate_transaction("getPaper", "MagnetoCorp", "00001")
        assert isinstance(result, Err)
        assert isinstance(result.error, EndorsementError)
        assert "does not exist" in result.error.reason
        await gateway.disconnect()
