"""papernet.core — result values, error values and shared value types."""

from papernet.core.errors import ChannelNotFoundError as ChannelNotFoundError
from papernet.core.errors import CommitError as CommitError
from papernet.core.errors import CommitTimeoutError as CommitTimeoutError
from papernet.core.errors import DecodeError as DecodeError
from papernet.core.errors import EndorsementError as EndorsementError
from papernet.core.errors import FieldViolation as FieldViolation
from papernet.core.errors import GatewayConnectionError as GatewayConnectionError
from papernet.core.errors import IdentityNotFoundError as IdentityNotFoundError
from papernet.core.errors import IllegalTransitionError as IllegalTransitionError
from papernet.core.errors import NoEndorsersError as NoEndorsersError
from papernet.core.errors import PapernetError as PapernetError
from papernet.core.errors import SessionClosedError as SessionClosedError
from papernet.core.errors import TransactionError as TransactionError
from papernet.core.errors import ValidationError as ValidationError
from papernet.core.result import Err as Err
from papernet.core.result import Ok as Ok
from papernet.core.result import Result as Result
from papernet.core.result import unwrap as unwrap
from papernet.core.serialization import canonical_bytes as canonical_bytes
from papernet.core.types import TransactionId as TransactionId
from papernet.core.types import UtcDatetime as UtcDatetime
