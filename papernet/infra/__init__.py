"""papernet.infra — in-memory ledger network, sandbox and configuration."""

from papernet.infra.config import RedeemDefaults as RedeemDefaults
from papernet.infra.config import TemporalConfig as TemporalConfig
from papernet.infra.memory_adapter import InMemoryLedgerNetwork as InMemoryLedgerNetwork
from papernet.infra.memory_adapter import InMemoryTransport as InMemoryTransport
from papernet.infra.paper_chaincode import PaperChaincode as PaperChaincode
from papernet.infra.sandbox import Sandbox as Sandbox
from papernet.infra.sandbox import build_sandbox as build_sandbox
