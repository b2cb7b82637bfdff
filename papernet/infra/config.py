"""Configuration for the Temporal worker and the redeem CLI.

Pure configuration data; no client library is imported here. Gateway
timeouts live with the gateway (papernet.gateway.types.GatewayTimeouts).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from papernet.instrument.requests import CONTRACT_NAME, CONTRACT_NAMESPACE

TASK_QUEUE: str = "papernet-transactions"


@final
@dataclass(frozen=True, slots=True)
class TemporalConfig:
    """Where the worker connects and which queue it serves."""

    target_host: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = TASK_QUEUE


@final
@dataclass(frozen=True, slots=True)
class RedeemDefaults:
    """Defaults of the redeem CLI: DigiBank's balaji redeems MagnetoCorp paper 00001."""

    identity: str = "balaji"
    channel: str = "mychannel"
    contract_name: str = CONTRACT_NAME
    contract_namespace: str = CONTRACT_NAMESPACE
    issuer: str = "MagnetoCorp"
    paper_number: str = "00001"
    redeeming_owner: str = "DigiBank"
    redeeming_owner_msp: str = "Org2MSP"
    redeem_date: str = "2020-11-30"
