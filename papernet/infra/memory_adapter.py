"""In-memory ledger network and transport.

Test doubles (and the CLI sandbox) that let the whole client run without
peers, orderers or TLS. The network simulates just enough of the ledger
to exercise the client protocol: identity checks at connect, channel
discovery, signed-proposal endorsement with read/write sets, ordering
with MVCC validation, and a configurable commit-event delay. It does not
model consensus or gossip. None of this is production code.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import final

from papernet.core.errors import ChannelNotFoundError, CommitError, GatewayConnectionError
from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime
from papernet.gateway.profile import PeerEndpoint
from papernet.gateway.transport import (
    STATUS_OK,
    ChannelTopology,
    CommitStatus,
    EndorsingPeer,
    ProposalResponse,
    SignedProposal,
    TransactionEnvelope,
    ValidationCode,
)
from papernet.identity.credentials import verify
from papernet.identity.wallet import Identity
from papernet.infra.paper_chaincode import InvocationContext, PaperChaincode

logger = logging.getLogger(__name__)


@final
@dataclass
class InMemoryPeer:
    name: str
    msp_id: str
    url: str
    reachable: bool = True


@final
@dataclass
class InMemoryChannel:
    """Channel ledger: world state (value, version), blocks, per-tx status."""

    name: str
    peers: list[InMemoryPeer]
    chaincodes: dict[str, PaperChaincode] = field(default_factory=dict)
    state: dict[str, tuple[bytes, int]] = field(default_factory=dict)
    blocks: list[tuple[str, ...]] = field(default_factory=list)
    statuses: dict[str, CommitStatus] = field(default_factory=dict)

    def put(self, key: str, value: bytes) -> None:
        """Write directly to world state (seeding and tests)."""
        _, version = self.state.get(key, (b"", 0))
        self.state[key] = (value, version + 1)

    def get(self, key: str) -> bytes | None:
        entry = self.state.get(key)
        return None if entry is None else entry[0]


@final
class InMemoryLedgerNetwork:
    """A ledger network shared by any number of InMemoryTransport sessions.

    Knobs for tests: peer reachability, commit_delay_s, forced validation
    codes, orderer refusal.
    """

    def __init__(self, *, tls_ca_pem: str | None = None) -> None:
        self.tls_ca_pem = tls_ca_pem
        self.channels: dict[str, InMemoryChannel] = {}
        self.peers: dict[str, InMemoryPeer] = {}
        self._members: dict[str, set[bytes]] = {}
        self.commit_delay_s: float = 0.0
        self.force_validation_code: ValidationCode | None = None
        self.orderer_available: bool = True
        self.connect_count = 0
        self.close_count = 0
        self.submitted: list[TransactionEnvelope] = []

    # --- Topology ---

    def add_peer(self, name: str, msp_id: str, url: str) -> InMemoryPeer:
        peer = InMemoryPeer(name=name, msp_id=msp_id, url=url)
        self.peers[name] = peer
        return peer

    def add_channel(self, name: str, peer_names: tuple[str, ...]) -> InMemoryChannel:
        channel = InMemoryChannel(name=name, peers=[self.peers[p] for p in peer_names])
        self.channels[name] = channel
        return channel

    def deploy(self, channel: str, chaincode_name: str, chaincode: PaperChaincode) -> None:
        self.channels[channel].chaincodes[chaincode_name] = chaincode

    def enroll(self, identity: Identity) -> None:
        """Make an identity known to its organisation's membership service."""
        self._members.setdefault(identity.msp_id, set()).add(identity.credentials.public_key_pem)

    def set_reachable(self, peer_name: str, reachable: bool) -> None:  # noqa: FBT001
        self.peers[peer_name].reachable = reachable

    def is_member(self, identity: Identity) -> bool:
        return identity.credentials.public_key_pem in self._members.get(identity.msp_id, set())

    @property
    def open_sessions(self) -> int:
        return self.connect_count - self.close_count

    def transport(self) -> InMemoryTransport:
        """A fresh transport for one gateway session."""
        return InMemoryTransport(self)

    # --- Ordering service ---

    def cut_block(self, channel: InMemoryChannel, envelope: TransactionEnvelope) -> CommitStatus:
        """Validate and commit one envelope as its own block."""
        tx_id = envelope.transaction_id
        endorsement = envelope.endorsements[0]
        code = ValidationCode.VALID
        if self.force_validation_code is not None:
            code = self.force_validation_code
            self.force_validation_code = None
        elif tx_id in channel.statuses:
            code = ValidationCode.DUPLICATE_TXID
        elif any(
            channel.state.get(key, (b"", 0))[1] != version
            for key, version in endorsement.read_write_set.reads
        ):
            code = ValidationCode.MVCC_READ_CONFLICT

        block_number = len(channel.blocks)
        channel.blocks.append((tx_id,))
        if code is ValidationCode.VALID:
            for key, value in endorsement.read_write_set.writes:
                channel.put(key, value)
        status = CommitStatus(transaction_id=tx_id, code=code, block_number=block_number)
        channel.statuses.setdefault(tx_id, status)
        logger.debug("Block %d on %s: tx %s %s", block_number, channel.name, tx_id[:12], code.value)
        return status


def _connection_error(endpoint: str, cause: str) -> Err[GatewayConnectionError]:
    return Err(GatewayConnectionError(
        message=f"Failed to connect to {endpoint}: {cause}",
        code="GATEWAY_CONNECT",
        timestamp=UtcDatetime.now(),
        source="infra.memory_adapter.InMemoryTransport",
        endpoint=endpoint,
        cause=cause,
    ))


def _commit_error(tx_id: str, reason: str, validation_code: str) -> Err[CommitError]:
    return Err(CommitError(
        message=f"Transaction {tx_id[:12]} not committed: {reason}",
        code="COMMIT_FAILURE",
        timestamp=UtcDatetime.now(),
        source="infra.memory_adapter.InMemoryTransport",
        transaction_id=tx_id,
        reason=reason,
        validation_code=validation_code,
    ))


@final
class InMemoryTransport:
    """LedgerTransport over an InMemoryLedgerNetwork. One per gateway session."""

    def __init__(self, network: InMemoryLedgerNetwork) -> None:
        self._network = network
        self._identity: Identity | None = None

    @property
    def connected(self) -> bool:
        return self._identity is not None

    async def connect(
        self, endpoint: PeerEndpoint, url: str, identity: Identity,
    ) -> Ok[None] | Err[GatewayConnectionError]:
        peer = self._network.peers.get(endpoint.name)
        if peer is None or not peer.reachable:
            return _connection_error(url, "endpoint unreachable")
        if endpoint.uses_tls and endpoint.tls_ca_pem != self._network.tls_ca_pem:
            return _connection_error(url, "TLS handshake failed: untrusted certificate authority")
        if not self._network.is_member(identity):
            return _connection_error(url, f"identity {identity.label!r} rejected by gateway")
        self._identity = identity
        self._network.connect_count += 1
        return Ok(None)

    async def close(self) -> None:
        if self._identity is None:
            return
        self._identity = None
        self._network.close_count += 1

    async def discover(self, channel: str) -> Ok[ChannelTopology] | Err[ChannelNotFoundError]:
        ch = self._network.channels.get(channel)
        if ch is None or self._identity is None:
            return Err(ChannelNotFoundError(
                message=f"Channel {channel!r} is not known to the gateway",
                code="CHANNEL_NOT_FOUND",
                timestamp=UtcDatetime.now(),
                source="infra.memory_adapter.InMemoryTransport.discover",
                channel=channel,
            ))
        return Ok(ChannelTopology(
            channel=channel,
            peers=tuple(EndorsingPeer(name=p.name, msp_id=p.msp_id, url=p.url) for p in ch.peers),
        ))

    async def endorse(
        self, peer: EndorsingPeer, proposal: SignedProposal,
    ) -> Ok[ProposalResponse] | Err[GatewayConnectionError]:
        target = self._network.peers.get(peer.name)
        if target is None or not target.reachable:
            return _connection_error(peer.url, "endorser unreachable")
        await asyncio.sleep(0)

        p = proposal.proposal
        ch = self._network.channels.get(p.channel)
        if ch is None or target not in ch.peers:
            return Ok(ProposalResponse(
                peer=peer.name, status=404, payload=b"",
                message=f"peer {peer.name} has not joined channel {p.channel}",
            ))
        if not verify(p.creator_public_key_pem, p.signing_bytes(), proposal.signature):
            return Ok(ProposalResponse(
                peer=peer.name, status=403, payload=b"",
                message="access denied: creator signature invalid",
            ))
        chaincode = ch.chaincodes.get(p.contract.name)
        if chaincode is None:
            return Ok(ProposalResponse(
                peer=peer.name, status=500, payload=b"",
                message=f"chaincode {p.contract.name} not found on {p.channel}",
            ))

        ctx = InvocationContext(
            channel=p.channel,
            creator_msp_id=p.creator_msp_id,
            transaction_id=p.transaction_id.value,
        )
        match chaincode.invoke(ch.state, ctx, p.qualified_name, p.args):
            case Err(reason):
                return Ok(ProposalResponse(
                    peer=peer.name, status=500, payload=b"", message=reason,
                ))
            case Ok(result):
                return Ok(ProposalResponse(
                    peer=peer.name, status=STATUS_OK, payload=result.payload,
                    read_write_set=result.read_write_set,
                ))

    async def order(self, envelope: TransactionEnvelope) -> Ok[None] | Err[CommitError]:
        tx_id = envelope.transaction_id
        if not self._network.orderer_available:
            return _commit_error(tx_id, "ordering service unavailable", "SERVICE_UNAVAILABLE")
        ch = self._network.channels.get(envelope.proposal.proposal.channel)
        if ch is None or not envelope.endorsements:
            return _commit_error(tx_id, "envelope rejected by orderer", "BAD_REQUEST")
        self._network.submitted.append(envelope)
        self._network.cut_block(ch, envelope)
        return Ok(None)

    async def wait_for_commit(
        self, channel: str, transaction_id: str,
    ) -> Ok[CommitStatus] | Err[CommitError]:
        await asyncio.sleep(self._network.commit_delay_s)
        ch = self._network.channels.get(channel)
        status = None if ch is None else ch.statuses.get(transaction_id)
        if status is None:
            return _commit_error(transaction_id, "no commit event for transaction", "NOT_FOUND")
        return Ok(status)
