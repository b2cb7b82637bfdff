"""Tests for papernet.gateway.profile — connection profile parsing and loading."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest
import yaml

from papernet.core.errors import ValidationError
from papernet.core.result import Err, unwrap
from papernet.gateway.profile import (
    ConnectionProfile,
    PeerEndpoint,
    load_connection_profile,
    localhost_url,
    parse_connection_profile,
)
from papernet.infra.sandbox import SANDBOX_TLS_CA, sandbox_profile_document


@pytest.fixture
def document() -> dict[str, Any]:
    return copy.deepcopy(sandbox_profile_document())


def _violations(result: object) -> set[str]:
    assert isinstance(result, Err)
    assert isinstance(result.error, ValidationError)
    assert result.error.code == "PROFILE_INVALID"
    return {f.path for f in result.error.fields}


# ---------------------------------------------------------------------------
# Valid profiles
# ---------------------------------------------------------------------------


class TestParseValid:
    def test_sandbox_profile(self, document: dict[str, Any]) -> None:
        profile = unwrap(parse_connection_profile(document))
        assert isinstance(profile, ConnectionProfile)
        assert profile.name == "test-network-org2"
        assert profile.client_organization == "Org2"
        assert profile.client_msp_id == "Org2MSP"
        assert [p.name for p in profile.client_peers()] == ["peer0.org2.example.com"]

    def test_peer_trust_material(self, document: dict[str, Any]) -> None:
        profile = unwrap(parse_connection_profile(document))
        peer = profile.peer("peer0.org2.example.com")
        assert peer is not None
        assert peer.uses_tls
        assert peer.tls_ca_pem == SANDBOX_TLS_CA
        assert peer.ssl_target_name_override == "peer0.org2.example.com"

    def test_version_defaults(self, document: dict[str, Any]) -> None:
        del document["version"]
        assert unwrap(parse_connection_profile(document)).version == "1.0.0"

    def test_plaintext_peer_needs_no_ca(self, document: dict[str, Any]) -> None:
        document["peers"]["peer0.org2.example.com"] = {"url": "grpc://peer0.org2.example.com:9051"}
        profile = unwrap(parse_connection_profile(document))
        peer = profile.peer("peer0.org2.example.com")
        assert peer is not None
        assert not peer.uses_tls

    def test_orderers_parsed(self, document: dict[str, Any]) -> None:
        document["orderers"] = {
            "orderer.example.com": {
                "url": "grpcs://orderer.example.com:7050",
                "tlsCACerts": {"pem": SANDBOX_TLS_CA},
            },
        }
        profile = unwrap(parse_connection_profile(document))
        assert [o.name for o in profile.orderers] == ["orderer.example.com"]


# ---------------------------------------------------------------------------
# Invalid profiles: every violation reported
# ---------------------------------------------------------------------------


class TestParseInvalid:
    def test_not_a_mapping(self) -> None:
        assert "<profile>" in _violations(parse_connection_profile(["peers"]))  # type: ignore[arg-type]

    def test_missing_name_and_client(self, document: dict[str, Any]) -> None:
        del document["name"]
        del document["client"]
        assert {"name", "client.organization"} <= _violations(parse_connection_profile(document))

    def test_bad_url(self, document: dict[str, Any]) -> None:
        document["peers"]["peer0.org1.example.com"]["url"] = "https://peer0:7051"
        assert "peers.peer0.org1.example.com.url" in _violations(parse_connection_profile(document))

    def test_url_without_port(self, document: dict[str, Any]) -> None:
        document["peers"]["peer0.org1.example.com"]["url"] = "grpcs://peer0.org1.example.com"
        assert "peers.peer0.org1.example.com.url" in _violations(parse_connection_profile(document))

    def test_grpcs_without_ca(self, document: dict[str, Any]) -> None:
        del document["peers"]["peer0.org2.example.com"]["tlsCACerts"]
        assert "peers.peer0.org2.example.com.tlsCACerts.pem" in _violations(
            parse_connection_profile(document),
        )

    def test_org_references_unknown_peer(self, document: dict[str, Any]) -> None:
        document["organizations"]["Org1"]["peers"].append("peer9.org1.example.com")
        assert "organizations.Org1.peers" in _violations(parse_connection_profile(document))

    def test_org_without_mspid(self, document: dict[str, Any]) -> None:
        del document["organizations"]["Org1"]["mspid"]
        assert "organizations.Org1.mspid" in _violations(parse_connection_profile(document))

    def test_client_org_undefined(self, document: dict[str, Any]) -> None:
        document["client"]["organization"] = "Org3"
        assert "client.organization" in _violations(parse_connection_profile(document))

    def test_client_org_without_peers(self, document: dict[str, Any]) -> None:
        document["organizations"]["Org2"]["peers"] = []
        assert "organizations.Org2.peers" in _violations(parse_connection_profile(document))

    def test_violations_accumulate(self, document: dict[str, Any]) -> None:
        del document["name"]
        document["peers"]["peer0.org1.example.com"]["url"] = "nope"
        del document["organizations"]["Org2"]["mspid"]
        assert len(_violations(parse_connection_profile(document))) >= 3


# ---------------------------------------------------------------------------
# Loading and address rewriting
# ---------------------------------------------------------------------------


class TestLoad:
    def test_load_yaml(self, tmp_path: Path, document: dict[str, Any]) -> None:
        path = tmp_path / "connection-org2.yaml"
        path.write_text(yaml.safe_dump(document), encoding="utf-8")
        assert unwrap(load_connection_profile(path)).client_msp_id == "Org2MSP"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_connection_profile(tmp_path / "absent.yaml")
        assert isinstance(result, Err)
        assert result.error.code == "PROFILE_UNREADABLE"

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("peers: [unclosed", encoding="utf-8")
        result = load_connection_profile(path)
        assert isinstance(result, Err)
        assert result.error.code == "PROFILE_UNREADABLE"


class TestLocalhost:
    def test_rewrites_host_keeps_scheme_and_port(self) -> None:
        assert localhost_url("grpcs://peer0.org2.example.com:9051") == "grpcs://localhost:9051"

    def test_resolved_url(self) -> None:
        peer = PeerEndpoint(name="p", url="grpcs://peer0.org2.example.com:9051")
        assert peer.resolved_url(as_localhost=True) == "grpcs://localhost:9051"
        assert peer.resolved_url(as_localhost=False) == "grpcs://peer0.org2.example.com:9051"
