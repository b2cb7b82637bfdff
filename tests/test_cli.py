"""Tests for papernet.cli — the redeem command against the sandbox network."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import pytest
import yaml

from papernet import cli
from papernet.cli import build_parser, main
from papernet.infra.config import RedeemDefaults
from papernet.infra.sandbox import sandbox_profile_document


def _lines(capsys: pytest.CaptureFixture[str]) -> list[str]:
    return capsys.readouterr().out.splitlines()


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.identity == "balaji"
        assert args.issuer == "MagnetoCorp"
        assert args.paper_number == "00001"
        assert args.owner == "DigiBank"
        assert args.owner_msp == "Org2MSP"
        assert args.redeem_date == "2020-11-30"
        assert args.profile is None
        assert args.commit_timeout is None

    def test_custom_defaults(self) -> None:
        args = build_parser(RedeemDefaults(identity="isabella")).parse_args([])
        assert args.identity == "isabella"

    def test_commit_timeout_is_float(self) -> None:
        assert build_parser().parse_args(["--commit-timeout", "2.5"]).commit_timeout == 2.5


class TestMain:
    def test_redeem_succeeds(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 0
        lines = _lines(capsys)
        assert lines[0] == "Connect to Fabric gateway"
        assert "MagnetoCorp commercial paper : 00001 successfully redeemed with DigiBank" in lines
        assert "Transaction complete!" in lines
        assert lines[-2:] == ["Disconnect from Fabric gateway", "Redeem program complete."]

    def test_unknown_identity(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--identity", "nobody"]) == 1
        lines = _lines(capsys)
        assert any(line.startswith("Error processing transaction. identity failed:") for line in lines)
        assert lines[-1] == "Redeem program complete."

    def test_missing_paper(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--paper-number", "00009"]) == 1
        lines = _lines(capsys)
        assert any("does not exist" in line for line in lines)
        assert "Transaction complete!" not in lines
        assert lines[-2:] == ["Disconnect from Fabric gateway", "Redeem program complete."]

    def test_profile_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "connection-org2.yaml"
        path.write_text(yaml.safe_dump(sandbox_profile_document()), encoding="utf-8")
        assert main(["--profile", str(path)]) == 0
        assert "Transaction complete!" in _lines(capsys)

    def test_profile_missing(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--profile", str(tmp_path / "absent.yaml")]) == 1
        lines = _lines(capsys)
        assert lines[0].startswith("Error processing transaction.")
        assert "Connect to Fabric gateway" not in lines
        assert lines[-1] == "Redeem program complete."

    def test_empty_namespace_rejected(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--namespace", ""]) == 1
        lines = _lines(capsys)
        assert any(line.startswith("Error processing transaction. contract failed:") for line in lines)
        assert "Transaction complete!" not in lines

    def test_unexpected_fault(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        async def _crash(*args: object, **kwargs: object) -> NoReturn:
            raise RuntimeError("transport fault")

        monkeypatch.setattr(cli, "redeem_paper", _crash)
        assert main([]) == 1
        lines = _lines(capsys)
        assert lines[-1] == "Redeem program exception."
        assert "Redeem program complete." not in lines
