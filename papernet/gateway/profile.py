"""Connection profile — raw document to ConnectionProfile.

parse_connection_profile is the single entry point for profile data; it
collects every field violation before failing so an operator can fix a
profile in one pass. The profile is immutable for a session's lifetime.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, final
from urllib.parse import urlsplit

import yaml

from papernet.core.errors import FieldViolation, ValidationError
from papernet.core.result import Err, Ok
from papernet.core.types import UtcDatetime

_SCHEMES: frozenset[str] = frozenset({"grpc", "grpcs"})


def localhost_url(url: str) -> str:
    """Same scheme and port, host replaced by localhost."""
    parts = urlsplit(url)
    netloc = "localhost" if parts.port is None else f"localhost:{parts.port}"
    return parts._replace(netloc=netloc).geturl()


@final
@dataclass(frozen=True, slots=True)
class PeerEndpoint:
    """A peer or orderer endpoint and its trust material."""

    name: str
    url: str
    tls_ca_pem: str | None = None
    ssl_target_name_override: str | None = None

    @property
    def uses_tls(self) -> bool:
        return urlsplit(self.url).scheme == "grpcs"

    def resolved_url(self, *, as_localhost: bool) -> str:
        """Address to dial. as_localhost rewrites the host only; TLS names are untouched."""
        return localhost_url(self.url) if as_localhost else self.url


@final
@dataclass(frozen=True, slots=True)
class Organization:
    name: str
    msp_id: str
    peers: tuple[str, ...]


@final
@dataclass(frozen=True, slots=True)
class ConnectionProfile:
    """Parsed gateway connection profile."""

    name: str
    version: str
    client_organization: str
    organizations: tuple[Organization, ...]
    peers: tuple[PeerEndpoint, ...]
    orderers: tuple[PeerEndpoint, ...] = ()

    def organization(self, name: str) -> Organization | None:
        return next((o for o in self.organizations if o.name == name), None)

    def peer(self, name: str) -> PeerEndpoint | None:
        return next((p for p in self.peers if p.name == name), None)

    @property
    def client_msp_id(self) -> str:
        org = self.organization(self.client_organization)
        assert org is not None  # guaranteed by parse_connection_profile
        return org.msp_id

    def client_peers(self) -> tuple[PeerEndpoint, ...]:
        """Peers of the client organisation, in profile order."""
        org = self.organization(self.client_organization)
        if org is None:
            return ()
        return tuple(p for name in org.peers if (p := self.peer(name)) is not None)


def _extract_str(raw: dict[str, Any], key: str) -> str | None:
    val = raw.get(key)
    if isinstance(val, str) and val:
        return val
    return None


def _extract_mapping(raw: dict[str, Any], key: str) -> dict[str, Any] | None:
    val = raw.get(key)
    if isinstance(val, dict):
        return val
    return None


def _parse_endpoints(
    section: dict[str, Any], kind: str, violations: list[FieldViolation],
) -> tuple[PeerEndpoint, ...]:
    endpoints: list[PeerEndpoint] = []
    for name, body in section.items():
        path = f"{kind}.{name}"
        if not isinstance(body, dict):
            violations.append(FieldViolation(
                path=path, constraint="must be a mapping", actual_value=repr(body),
            ))
            continue
        url = _extract_str(body, "url")
        if url is None:
            violations.append(FieldViolation(
                path=f"{path}.url", constraint="required string",
                actual_value=repr(body.get("url")),
            ))
            continue
        parts = urlsplit(url)
        try:
            port = parts.port
        except ValueError:
            port = None
        if parts.scheme not in _SCHEMES or not parts.hostname or port is None:
            violations.append(FieldViolation(
                path=f"{path}.url", constraint="must be grpc[s]://host:port",
                actual_value=url,
            ))
            continue

        tls = _extract_mapping(body, "tlsCACerts") or {}
        tls_pem = _extract_str(tls, "pem")
        if parts.scheme == "grpcs" and tls_pem is None:
            violations.append(FieldViolation(
                path=f"{path}.tlsCACerts.pem", constraint="required for grpcs endpoints",
                actual_value=repr(tls.get("pem")),
            ))
        grpc_options = _extract_mapping(body, "grpcOptions") or {}
        endpoints.append(PeerEndpoint(
            name=str(name),
            url=url,
            tls_ca_pem=tls_pem,
            ssl_target_name_override=_extract_str(grpc_options, "ssl-target-name-override"),
        ))
    return tuple(endpoints)


def parse_connection_profile(  # noqa: C901
    raw: dict[str, Any],
) -> Ok[ConnectionProfile] | Err[ValidationError]:
    """Parse a raw profile document into a ConnectionProfile.

    Total: always returns Ok or Err, never raises on malformed input.
    """
    violations: list[FieldViolation] = []
    if not isinstance(raw, dict):
        violations.append(FieldViolation(
            path="<profile>", constraint="must be a mapping", actual_value=type(raw).__name__,
        ))
        raw = {}

    name = _extract_str(raw, "name")
    if name is None:
        violations.append(FieldViolation(
            path="name", constraint="required string", actual_value=repr(raw.get("name")),
        ))
    version_raw = raw.get("version", "1.0.0")
    version = str(version_raw)

    client = _extract_mapping(raw, "client") or {}
    client_org = _extract_str(client, "organization")
    if client_org is None:
        violations.append(FieldViolation(
            path="client.organization", constraint="required string",
            actual_value=repr(client.get("organization")),
        ))

    # --- Peers / orderers ---
    peers: tuple[PeerEndpoint, ...] = ()
    peer_section = _extract_mapping(raw, "peers")
    if not peer_section:
        violations.append(FieldViolation(
            path="peers", constraint="required non-empty mapping",
            actual_value=repr(raw.get("peers")),
        ))
    else:
        peers = _parse_endpoints(peer_section, "peers", violations)
    peer_names = {p.name for p in peers}

    orderers: tuple[PeerEndpoint, ...] = ()
    orderer_section = _extract_mapping(raw, "orderers")
    if orderer_section:
        orderers = _parse_endpoints(orderer_section, "orderers", violations)

    # --- Organizations ---
    organizations: list[Organization] = []
    org_section = _extract_mapping(raw, "organizations")
    if not org_section:
        violations.append(FieldViolation(
            path="organizations", constraint="required non-empty mapping",
            actual_value=repr(raw.get("organizations")),
        ))
        org_section = {}
    for org_name, body in org_section.items():
        path = f"organizations.{org_name}"
        if not isinstance(body, dict):
            violations.append(FieldViolation(
                path=path, constraint="must be a mapping", actual_value=repr(body),
            ))
            continue
        msp_id = _extract_str(body, "mspid")
        if msp_id is None:
            violations.append(FieldViolation(
                path=f"{path}.mspid", constraint="required string",
                actual_value=repr(body.get("mspid")),
            ))
            continue
        org_peers = body.get("peers", [])
        if not isinstance(org_peers, list) or not all(isinstance(p, str) for p in org_peers):
            violations.append(FieldViolation(
                path=f"{path}.peers", constraint="must be a list of peer names",
                actual_value=repr(org_peers),
            ))
            continue
        for p in org_peers:
            if p not in peer_names:
                violations.append(FieldViolation(
                    path=f"{path}.peers", constraint="must reference a defined peer",
                    actual_value=p,
                ))
        organizations.append(Organization(
            name=str(org_name), msp_id=msp_id, peers=tuple(org_peers),
        ))

    if client_org is not None and org_section:
        client_body = next((o for o in organizations if o.name == client_org), None)
        if client_body is None:
            violations.append(FieldViolation(
                path="client.organization", constraint="must name a defined organization",
                actual_value=client_org,
            ))
        elif not client_body.peers:
            violations.append(FieldViolation(
                path=f"organizations.{client_org}.peers",
                constraint="client organization needs at least one peer",
                actual_value="[]",
            ))

    if violations:
        return Err(ValidationError(
            message=f"Connection profile invalid: {len(violations)} violation(s)",
            code="PROFILE_INVALID",
            timestamp=UtcDatetime.now(),
            source="gateway.profile.parse_connection_profile",
            fields=tuple(violations),
        ))

    assert name is not None and client_org is not None
    return Ok(ConnectionProfile(
        name=name,
        version=version,
        client_organization=client_org,
        organizations=tuple(organizations),
        peers=peers,
        orderers=orderers,
    ))


def load_connection_profile(path: str | Path) -> Ok[ConnectionProfile] | Err[ValidationError]:
    """Read a YAML (or JSON) profile from disk and parse it."""
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        return Err(ValidationError(
            message=f"Cannot load connection profile {path}: {e}",
            code="PROFILE_UNREADABLE",
            timestamp=UtcDatetime.now(),
            source="gateway.profile.load_connection_profile",
            fields=(FieldViolation(path="<file>", constraint="readable YAML", actual_value=str(path)),),
        ))
    return parse_connection_profile(raw)
