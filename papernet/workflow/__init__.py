"""papernet.workflow -- paper transaction orchestration and its Temporal wrapper.

Only data types are re-exported here so the Temporal workflow sandbox can
import the package without pulling in the gateway stack. The orchestrator
lives in papernet.workflow.paper.
"""

from papernet.workflow.types import InvocationTarget as InvocationTarget
from papernet.workflow.types import PaperTransactionInput as PaperTransactionInput
from papernet.workflow.types import PaperTransactionOutput as PaperTransactionOutput
from papernet.workflow.types import Phase as Phase
from papernet.workflow.types import PhaseFailure as PhaseFailure
from papernet.workflow.types import TransactionOutcome as TransactionOutcome
