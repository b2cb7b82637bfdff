"""papernet.gateway — connection profile, gateway session and transaction invoker."""

from papernet.gateway.gateway import Contract as Contract
from papernet.gateway.gateway import Gateway as Gateway
from papernet.gateway.gateway import Network as Network
from papernet.gateway.gateway import SessionState as SessionState
from papernet.gateway.profile import ConnectionProfile as ConnectionProfile
from papernet.gateway.profile import Organization as Organization
from papernet.gateway.profile import PeerEndpoint as PeerEndpoint
from papernet.gateway.profile import load_connection_profile as load_connection_profile
from papernet.gateway.profile import parse_connection_profile as parse_connection_profile
from papernet.gateway.transport import ChannelTopology as ChannelTopology
from papernet.gateway.transport import CommitStatus as CommitStatus
from papernet.gateway.transport import EndorsingPeer as EndorsingPeer
from papernet.gateway.transport import LedgerTransport as LedgerTransport
from papernet.gateway.transport import ProposalResponse as ProposalResponse
from papernet.gateway.transport import ReadWriteSet as ReadWriteSet
from papernet.gateway.transport import SignedProposal as SignedProposal
from papernet.gateway.transport import TransactionEnvelope as TransactionEnvelope
from papernet.gateway.transport import ValidationCode as ValidationCode
from papernet.gateway.types import ConnectionOptions as ConnectionOptions
from papernet.gateway.types import ContractRef as ContractRef
from papernet.gateway.types import DiscoveryOptions as DiscoveryOptions
from papernet.gateway.types import GatewayTimeouts as GatewayTimeouts
