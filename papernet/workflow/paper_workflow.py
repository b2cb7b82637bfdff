"""Durable workflow around one paper transaction.

Determinism contract: this module contains NO I/O, NO randomness and NO
system clock access. The ledger interaction happens in the
submit_paper_transaction activity, which runs at most once.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from papernet.gateway.types import GatewayTimeouts
    from papernet.workflow.activities import PaperActivities
    from papernet.workflow.types import PaperTransactionInput, PaperTransactionOutput

# A resubmitted transaction can apply twice.
SUBMIT_RETRY = RetryPolicy(maximum_attempts=1)

# Headroom over the commit wait for connect, discovery and endorsement.
ACTIVITY_MARGIN: timedelta = timedelta(seconds=60)


@workflow.defn(name="PaperTransaction")
class PaperTransactionWorkflow:
    """Submit one commercial-paper transaction and report its outcome.

    Every run reaches exactly one of COMMITTED, FAILED or AMBIGUOUS.
    """

    def __init__(self) -> None:
        self._status: str = "RECEIVED"

    @workflow.query
    def get_status(self) -> str:
        return self._status

    @workflow.run
    async def run(self, inp: PaperTransactionInput) -> PaperTransactionOutput:
        commit_s = inp.commit_timeout_s or GatewayTimeouts().commit_timeout_s
        self._status = "SUBMITTING"
        output = await workflow.execute_activity_method(
            PaperActivities.submit_paper_transaction,
            inp,
            start_to_close_timeout=timedelta(seconds=commit_s) + ACTIVITY_MARGIN,
            retry_policy=SUBMIT_RETRY,
        )
        self._status = output.outcome.name
        return output
