"""papernet.identity — wallets and signing credentials."""

from papernet.identity.credentials import SigningCredentials as SigningCredentials
from papernet.identity.credentials import generate_credentials as generate_credentials
from papernet.identity.credentials import sign as sign
from papernet.identity.credentials import verify as verify
from papernet.identity.wallet import Identity as Identity
from papernet.identity.wallet import InMemoryWallet as InMemoryWallet
from papernet.identity.wallet import Wallet as Wallet
from papernet.identity.wallet import resolve_identity as resolve_identity
