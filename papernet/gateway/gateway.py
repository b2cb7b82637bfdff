"""Gateway session, channel handle and contract handle.

A Gateway owns exactly one transport session. Network and Contract are
views scoped to that session: once disconnect() has run, every operation
on them returns SessionClosedError instead of touching the transport.

A Gateway is not safe for concurrent submission from several tasks; an
internal lock serialises accidental sharing.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from types import TracebackType
from typing import final

from papernet.core.errors import (
    ChannelNotFoundError,
    GatewayConnectionError,
    IdentityNotFoundError,
    SessionClosedError,
    TransactionError,
    ValidationError,
)
from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime
from papernet.gateway import invoker
from papernet.gateway.profile import ConnectionProfile, localhost_url
from papernet.gateway.transport import ChannelTopology, EndorsingPeer, LedgerTransport
from papernet.gateway.types import ConnectionOptions, ContractRef
from papernet.identity.wallet import Identity, resolve_identity

logger = logging.getLogger(__name__)


class SessionState(Enum):
    DISCONNECTED = "Disconnected"
    CONNECTED = "Connected"
    CLOSED = "Closed"


def _session_closed(operation: str) -> SessionClosedError:
    return SessionClosedError(
        message=f"Gateway session is not connected ({operation})",
        code="SESSION_CLOSED",
        timestamp=UtcDatetime.now(),
        source=f"gateway.gateway.{operation}",
        operation=operation,
    )


@final
class Gateway:
    """Identity-scoped session to a ledger gateway.

    Usage::

        gateway = Gateway(transport)
        try:
            match await gateway.connect(profile, options):
                ...
        finally:
            await gateway.disconnect()
    """

    def __init__(self, transport: LedgerTransport) -> None:
        self._transport = transport
        self._state = SessionState.DISCONNECTED
        self._profile: ConnectionProfile | None = None
        self._options: ConnectionOptions | None = None
        self._identity: Identity | None = None
        self._networks: dict[str, Network] = {}
        self._lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is SessionState.CONNECTED

    @property
    def identity(self) -> Identity | None:
        return self._identity

    async def connect(
        self, profile: ConnectionProfile, options: ConnectionOptions,
    ) -> Ok[Gateway] | Err[GatewayConnectionError | IdentityNotFoundError | ValidationError]:
        """Resolve the identity, then open a session on the first reachable client peer."""
        if self._state is not SessionState.DISCONNECTED:
            return Err(GatewayConnectionError(
                message=f"Gateway cannot connect from state {self._state.value}",
                code="GATEWAY_STATE",
                timestamp=UtcDatetime.now(),
                source="gateway.gateway.Gateway.connect",
                endpoint="",
                cause="gateway already used",
            ))

        match resolve_identity(options.wallet, options.identity):
            case Err() as e:
                return e
            case Ok(identity):
                pass

        causes: list[str] = []
        for peer in profile.client_peers():
            url = peer.resolved_url(as_localhost=options.discovery.as_localhost)
            match await self._transport.connect(peer, url, identity):
                case Ok():
                    self._state = SessionState.CONNECTED
                    self._profile = profile
                    self._options = options
                    self._identity = identity
                    logger.info(
                        "Connected to gateway %s at %s as %s (%s)",
                        peer.name, url, identity.label, identity.msp_id,
                    )
                    return Ok(self)
                case Err(error):
                    logger.warning("Gateway peer %s at %s refused: %s", peer.name, url, error.cause)
                    causes.append(f"{peer.name}: {error.cause}")

        return Err(GatewayConnectionError(
            message=f"Cannot connect to any gateway peer of {profile.client_organization}",
            code="GATEWAY_CONNECT",
            timestamp=UtcDatetime.now(),
            source="gateway.gateway.Gateway.connect",
            endpoint=",".join(p.name for p in profile.client_peers()),
            cause="; ".join(causes) or "no client peers",
        ))

    async def disconnect(self) -> None:
        """Release the session. Idempotent, never raises, no-op if never connected."""
        if self._state is not SessionState.CONNECTED:
            return
        self._state = SessionState.CLOSED
        self._networks.clear()
        try:
            await self._transport.close()
        except Exception:
            logger.warning("Transport close failed during disconnect", exc_info=True)
        logger.info("Disconnected from gateway")

    async def __aenter__(self) -> Gateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    async def get_network(
        self, name: str,
    ) -> Ok[Network] | Err[ChannelNotFoundError | SessionClosedError]:
        """Channel handle. Discovery runs here, once per channel per session."""
        if not self.is_connected:
            return Err(_session_closed("get_network"))
        if name in self._networks:
            return Ok(self._networks[name])
        assert self._options is not None and self._profile is not None

        match await self._transport.discover(name):
            case Err() as e:
                return e
            case Ok(discovered):
                pass

        as_localhost = self._options.discovery.as_localhost
        if self._options.discovery.enabled:
            peers = tuple(
                EndorsingPeer(
                    name=p.name, msp_id=p.msp_id,
                    url=localhost_url(p.url) if as_localhost else p.url,
                )
                for p in discovered.peers
            )
        else:
            peers = tuple(
                EndorsingPeer(
                    name=endpoint.name,
                    msp_id=org.msp_id,
                    url=endpoint.resolved_url(as_localhost=as_localhost),
                )
                for org in self._profile.organizations
                for peer_name in org.peers
                if (endpoint := self._profile.peer(peer_name)) is not None
            )
        network = Network(self, ChannelTopology(channel=name, peers=peers))
        self._networks[name] = network
        logger.info("Using channel %s with %d endorsing peer(s)", name, len(peers))
        return Ok(network)

    async def _submit(
        self,
        topology: ChannelTopology,
        contract: ContractRef,
        name: str,
        args: tuple[str, ...],
        timeout: float | None,
    ) -> Ok[bytes] | Err[TransactionError | SessionClosedError]:
        async with self._lock:
            if not self.is_connected:
                return Err(_session_closed("submit_transaction"))
            assert self._identity is not None and self._options is not None
            return await invoker.submit(
                self._transport, self._identity, topology, contract, name, args,
                self._options.timeouts, timeout,
            )

    async def _evaluate(
        self,
        topology: ChannelTopology,
        contract: ContractRef,
        name: str,
        args: tuple[str, ...],
    ) -> Ok[bytes] | Err[TransactionError | SessionClosedError]:
        async with self._lock:
            if not self.is_connected:
                return Err(_session_closed("evaluate_transaction"))
            assert self._identity is not None and self._options is not None
            return await invoker.evaluate(
                self._transport, self._identity, topology, contract, name, args,
                self._options.timeouts,
            )


@final
class Network:
    """Channel handle, valid while its gateway session is connected."""

    def __init__(self, gateway: Gateway, topology: ChannelTopology) -> None:
        self._gateway = gateway
        self._topology = topology

    @property
    def name(self) -> str:
        return self._topology.channel

    @property
    def topology(self) -> ChannelTopology:
        return self._topology

    def get_contract(
        self, name: str, namespace: str | None = None,
    ) -> Ok[Contract] | Err[ValidationError | SessionClosedError]:
        """Address a contract. Pure: no network I/O."""
        if not self._gateway.is_connected:
            return Err(_session_closed("get_contract"))
        return ContractRef.create(name, namespace).map(lambda ref: Contract(self, ref))


@final
class Contract:
    """Contract handle used to submit and evaluate transactions."""

    def __init__(self, network: Network, ref: ContractRef) -> None:
        self._network = network
        self._ref = ref

    @property
    def ref(self) -> ContractRef:
        return self._ref

    async def submit_transaction(
        self, name: str, *args: str, timeout: float | None = None,
    ) -> Ok[bytes] | Err[TransactionError | SessionClosedError]:
        """Endorse, order and commit; return the committed response payload.

        timeout bounds the commit wait (defaults to the session's
        commit_timeout_s). Exceeding it yields CommitTimeoutError.
        """
        return await self._network._gateway._submit(  # noqa: SLF001
            self._network.topology, self._ref, name, tuple(args), timeout,
        )

    async def evaluate_transaction(
        self, name: str, *args: str,
    ) -> Ok[bytes] | Err[TransactionError | SessionClosedError]:
        """Run a read-only transaction on one peer."""
        return await self._network._gateway._evaluate(  # noqa: SLF001
            self._network.topology, self._ref, name, tuple(args),
        )
