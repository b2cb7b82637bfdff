"""Gateway types — connection options and contract addressing.

ConnectionOptions pairs the wallet with the identity label to resolve in
it. Discovery settings change how endorsers are found, never which
credentials are trusted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import final

from papernet.core.errors import FieldViolation, ValidationError
from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime
from papernet.identity.wallet import Wallet


@final
@dataclass(frozen=True, slots=True)
class DiscoveryOptions:
    """enabled: learn endorsers from the channel; as_localhost: dial localhost."""

    enabled: bool = True
    as_localhost: bool = True


@final
@dataclass(frozen=True, slots=True)
class GatewayTimeouts:
    """Per-phase timeouts, in seconds."""

    endorse_timeout_s: float = 30.0
    commit_timeout_s: float = 300.0

    def __post_init__(self) -> None:
        if self.endorse_timeout_s <= 0 or self.commit_timeout_s <= 0:
            raise TypeError("GatewayTimeouts must be > 0")


@final
@dataclass(frozen=True, slots=True)
class ConnectionOptions:
    """What Gateway.connect needs besides the profile."""

    identity: str
    wallet: Wallet
    discovery: DiscoveryOptions = field(default_factory=DiscoveryOptions)
    timeouts: GatewayTimeouts = field(default_factory=GatewayTimeouts)


@final
@dataclass(frozen=True, slots=True)
class ContractRef:
    """Chaincode name plus the contract namespace inside it.

    namespace None addresses the chaincode's default contract; an empty
    string is malformed.
    """

    name: str
    namespace: str | None = None

    @staticmethod
    def create(
        name: str, namespace: str | None = None,
    ) -> Ok[ContractRef] | Err[ValidationError]:
        violations: list[FieldViolation] = []
        if not isinstance(name, str) or not name.strip():
            violations.append(FieldViolation(
                path="contract.name", constraint="must be non-empty", actual_value=repr(name),
            ))
        if namespace is not None and (not isinstance(namespace, str) or not namespace.strip()):
            violations.append(FieldViolation(
                path="contract.namespace", constraint="must be non-empty when given",
                actual_value=repr(namespace),
            ))
        if violations:
            return Err(ValidationError(
                message=f"Contract reference invalid: {len(violations)} violation(s)",
                code="CONTRACT_REF",
                timestamp=UtcDatetime.now(),
                source="gateway.types.ContractRef.create",
                fields=tuple(violations),
            ))
        return Ok(ContractRef(name=name, namespace=namespace))

    def qualified(self, transaction_name: str) -> str:
        """Transaction name as dispatched by the chaincode: ``namespace:name``."""
        if self.namespace:
            return f"{self.namespace}:{transaction_name}"
        return transaction_name

    def __str__(self) -> str:
        return f"{self.name}@{self.namespace}" if self.namespace else self.name
