"""Transport protocol between the gateway client and the ledger network.

The gateway depends on this abstraction; peers, orderers and their wire
encoding live behind it. All methods return Ok | Err so infrastructure
failures are visible values, never invisible exceptions.

Invariants:
  - endorse() returns Err only when the peer cannot be reached; a peer
    that rejects the proposal answers Ok(ProposalResponse) with
    status != 200 and the contract's message.
  - order() returns once the orderer has accepted or refused the envelope.
  - wait_for_commit() suspends until the peer reports the validation code
    for the transaction. It may never return; callers bound it with a
    timeout.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, final, runtime_checkable

from papernet.core.errors import ChannelNotFoundError, CommitError, GatewayConnectionError
from papernet.core.result import Err, Ok
from papernet.core.serialization import canonical_bytes
from papernet.core.types import TransactionId, UtcDatetime
from papernet.gateway.profile import PeerEndpoint
from papernet.gateway.types import ContractRef
from papernet.identity.wallet import Identity

STATUS_OK: int = 200


class ValidationCode(Enum):
    """Commit-time validation result of a transaction."""

    VALID = "VALID"
    MVCC_READ_CONFLICT = "MVCC_READ_CONFLICT"
    ENDORSEMENT_POLICY_FAILURE = "ENDORSEMENT_POLICY_FAILURE"
    DUPLICATE_TXID = "DUPLICATE_TXID"
    BAD_SIGNATURE = "BAD_SIGNATURE"


@final
@dataclass(frozen=True, slots=True)
class EndorsingPeer:
    """A peer that can endorse for a channel, as learnt from discovery or the profile."""

    name: str
    msp_id: str
    url: str


@final
@dataclass(frozen=True, slots=True)
class ChannelTopology:
    """Endorsing peers of a channel, in discovery order."""

    channel: str
    peers: tuple[EndorsingPeer, ...]

    def endorsing_set(self) -> tuple[EndorsingPeer, ...]:
        """One peer per organisation, which is the channel's endorsement policy."""
        chosen: dict[str, EndorsingPeer] = {}
        for p in self.peers:
            chosen.setdefault(p.msp_id, p)
        return tuple(chosen.values())

    def peers_of(self, msp_id: str) -> tuple[EndorsingPeer, ...]:
        return tuple(p for p in self.peers if p.msp_id == msp_id)


@final
@dataclass(frozen=True, slots=True)
class Proposal:
    """Unsigned transaction proposal."""

    transaction_id: TransactionId
    channel: str
    contract: ContractRef
    transaction_name: str
    args: tuple[str, ...]
    creator_msp_id: str
    creator_public_key_pem: bytes
    nonce: bytes
    timestamp: UtcDatetime

    @property
    def qualified_name(self) -> str:
        return self.contract.qualified(self.transaction_name)

    def signing_bytes(self) -> bytes:
        """Canonical bytes the creator signs and endorsers verify."""
        return canonical_bytes(self).unwrap()


@final
@dataclass(frozen=True, slots=True)
class SignedProposal:
    proposal: Proposal
    signature: bytes


@final
@dataclass(frozen=True, slots=True)
class ReadWriteSet:
    """Keys read (with the version seen) and written by a simulated transaction."""

    reads: tuple[tuple[str, int], ...] = ()
    writes: tuple[tuple[str, bytes], ...] = ()


@final
@dataclass(frozen=True, slots=True)
class ProposalResponse:
    """One peer's endorsement (or rejection) of a proposal."""

    peer: str
    status: int
    payload: bytes
    message: str = ""
    read_write_set: ReadWriteSet = ReadWriteSet()

    @property
    def endorsed(self) -> bool:
        return self.status == STATUS_OK


@final
@dataclass(frozen=True, slots=True)
class TransactionEnvelope:
    """Signed proposal plus the endorsements that satisfy the policy."""

    proposal: SignedProposal
    endorsements: tuple[ProposalResponse, ...]

    @property
    def transaction_id(self) -> str:
        return self.proposal.proposal.transaction_id.value


@final
@dataclass(frozen=True, slots=True)
class CommitStatus:
    transaction_id: str
    code: ValidationCode
    block_number: int


@runtime_checkable
class LedgerTransport(Protocol):
    """One gateway session's connection to the ledger network."""

    async def connect(
        self, endpoint: PeerEndpoint, url: str, identity: Identity,
    ) -> Ok[None] | Err[GatewayConnectionError]: ...

    async def close(self) -> None: ...

    async def discover(
        self, channel: str,
    ) -> Ok[ChannelTopology] | Err[ChannelNotFoundError]: ...

    async def endorse(
        self, peer: EndorsingPeer, proposal: SignedProposal,
    ) -> Ok[ProposalResponse] | Err[GatewayConnectionError]: ...

    async def order(
        self, envelope: TransactionEnvelope,
    ) -> Ok[None] | Err[CommitError]: ...

    async def wait_for_commit(
        self, channel: str, transaction_id: str,
    ) -> Ok[CommitStatus] | Err[CommitError]: ...
