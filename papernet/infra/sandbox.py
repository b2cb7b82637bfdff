"""PaperNet sandbox: a two-organisation in-memory network.

MagnetoCorp (Org1MSP) issues paper 00001 and DigiBank (Org2MSP) buys
it, so the redeem CLI has something to redeem without a live network.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, final

from dateutil.relativedelta import relativedelta

from papernet.core.result import unwrap
from papernet.gateway.profile import ConnectionProfile, parse_connection_profile
from papernet.identity.credentials import generate_credentials
from papernet.identity.wallet import Identity, InMemoryWallet
from papernet.infra.memory_adapter import InMemoryLedgerNetwork
from papernet.infra.paper_chaincode import PaperChaincode
from papernet.instrument.codec import encode_paper
from papernet.instrument.paper import CommercialPaper, PaperState
from papernet.instrument.requests import CONTRACT_NAME

SANDBOX_TLS_CA = "-----BEGIN CERTIFICATE-----\nsandbox-papernet-ca\n-----END CERTIFICATE-----\n"
SANDBOX_CHANNEL = "mychannel"

_ORG1_PEER = "peer0.org1.example.com"
_ORG2_PEER = "peer0.org2.example.com"


def sandbox_profile_document(client_organization: str = "Org2") -> dict[str, Any]:
    """Connection profile document in the layout gateways publish."""
    tls = {"pem": SANDBOX_TLS_CA}
    return {
        "name": f"test-network-{client_organization.lower()}",
        "version": "1.0.0",
        "client": {"organization": client_organization},
        "organizations": {
            "Org1": {"mspid": "Org1MSP", "peers": [_ORG1_PEER]},
            "Org2": {"mspid": "Org2MSP", "peers": [_ORG2_PEER]},
        },
        "peers": {
            _ORG1_PEER: {
                "url": f"grpcs://{_ORG1_PEER}:7051",
                "tlsCACerts": tls,
                "grpcOptions": {"ssl-target-name-override": _ORG1_PEER},
            },
            _ORG2_PEER: {
                "url": f"grpcs://{_ORG2_PEER}:9051",
                "tlsCACerts": tls,
                "grpcOptions": {"ssl-target-name-override": _ORG2_PEER},
            },
        },
    }


@final
@dataclass(frozen=True, slots=True)
class Sandbox:
    network: InMemoryLedgerNetwork
    wallet: InMemoryWallet
    profile: ConnectionProfile


def build_sandbox(*, seed_paper: bool = True) -> Sandbox:
    """Network, enrolled wallet (isabella@Org1MSP, balaji@Org2MSP) and Org2 profile."""
    network = InMemoryLedgerNetwork(tls_ca_pem=SANDBOX_TLS_CA)
    network.add_peer(_ORG1_PEER, "Org1MSP", f"grpcs://{_ORG1_PEER}:7051")
    network.add_peer(_ORG2_PEER, "Org2MSP", f"grpcs://{_ORG2_PEER}:9051")
    channel = network.add_channel(SANDBOX_CHANNEL, (_ORG1_PEER, _ORG2_PEER))
    network.deploy(SANDBOX_CHANNEL, CONTRACT_NAME, PaperChaincode())

    wallet = InMemoryWallet()
    for label, msp_id in (("isabella", "Org1MSP"), ("balaji", "Org2MSP")):
        identity = Identity(label=label, msp_id=msp_id, credentials=generate_credentials())
        wallet.put(identity)
        network.enroll(identity)

    if seed_paper:
        issued = date(2020, 5, 31)
        paper = CommercialPaper(
            issuer="MagnetoCorp",
            paper_number="00001",
            owner="DigiBank",
            issue_date=issued,
            maturity_date=issued + relativedelta(months=6),
            face_value=Decimal("5000000"),
            state=PaperState.TRADING,
            owner_msp="Org2MSP",
        )
        channel.put(paper.key, encode_paper(paper))

    profile = unwrap(parse_connection_profile(sandbox_profile_document()))
    return Sandbox(network=network, wallet=wallet, profile=profile)
