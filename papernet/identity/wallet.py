"""Identity store: resolves a participant name to a signing identity.

Lookup is read-only and local, so an unknown participant fails before
the gateway opens any connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, final, runtime_checkable

from papernet.core.errors import FieldViolation, IdentityNotFoundError, ValidationError
from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime
from papernet.identity.credentials import SigningCredentials


@final
@dataclass(frozen=True, slots=True)
class Identity:
    """A named participant and the credentials it signs with."""

    label: str
    msp_id: str
    credentials: SigningCredentials
    type: str = "X.509"

    def __post_init__(self) -> None:
        if not self.label:
            raise TypeError("Identity.label must be non-empty")
        if not self.msp_id:
            raise TypeError("Identity.msp_id must be non-empty")


@runtime_checkable
class Wallet(Protocol):
    """Backing credential store.

    Invariants:
      - get() returns Err(IdentityNotFoundError) for an unknown label.
      - get() has no side effects.
    """

    def get(self, label: str) -> Ok[Identity] | Err[IdentityNotFoundError]: ...

    def put(self, identity: Identity) -> None: ...

    def labels(self) -> tuple[str, ...]: ...


def _not_found(label: str, source: str) -> IdentityNotFoundError:
    return IdentityNotFoundError(
        message=f"An identity for the user {label!r} does not exist in the wallet",
        code="IDENTITY_NOT_FOUND",
        timestamp=UtcDatetime.now(),
        source=source,
        label=label,
    )


@final
class InMemoryWallet:
    """Dict-backed wallet. Used by tests, the sandbox and the Temporal worker."""

    def __init__(self, identities: tuple[Identity, ...] = ()) -> None:
        self._identities: dict[str, Identity] = {i.label: i for i in identities}

    def get(self, label: str) -> Ok[Identity] | Err[IdentityNotFoundError]:
        identity = self._identities.get(label)
        if identity is None:
            return Err(_not_found(label, "identity.wallet.InMemoryWallet.get"))
        return Ok(identity)

    def put(self, identity: Identity) -> None:
        """Insert or replace by label."""
        self._identities[identity.label] = identity

    def remove(self, label: str) -> bool:
        return self._identities.pop(label, None) is not None

    def labels(self) -> tuple[str, ...]:
        return tuple(sorted(self._identities))


def resolve_identity(
    wallet: Wallet, name: str,
) -> Ok[Identity] | Err[IdentityNotFoundError | ValidationError]:
    """Resolve a participant name to exactly one identity."""
    if not isinstance(name, str) or not name:
        return Err(ValidationError(
            message="Identity name must be a non-empty string",
            code="IDENTITY_NAME",
            timestamp=UtcDatetime.now(),
            source="identity.wallet.resolve_identity",
            fields=(FieldViolation(
                path="identity", constraint="must be non-empty", actual_value=repr(name),
            ),),
        ))
    return wallet.get(name)
