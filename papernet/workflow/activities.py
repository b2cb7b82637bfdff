"""Temporal activity that runs one paper transaction.

The activity is a thin IO wrapper around submit_paper_transaction. It
holds the network wiring (transport factory, profile, wallet), opens a
fresh session per attempt and always tears it down.

Not idempotent: a resubmitted transaction gets a new transaction id and
can apply twice, so the workflow runs it with maximum_attempts=1.
"""

from __future__ import annotations

from collections.abc import Callable

from temporalio import activity

from papernet.core.result import Err, Ok
from papernet.gateway.profile import ConnectionProfile
from papernet.gateway.transport import LedgerTransport
from papernet.gateway.types import DiscoveryOptions, GatewayTimeouts
from papernet.identity.wallet import Wallet
from papernet.workflow.paper import submit_paper_transaction
from papernet.workflow.types import PaperTransactionInput, PaperTransactionOutput


class PaperActivities:
    """Activities bound to one ledger network."""

    def __init__(
        self,
        transport_factory: Callable[[], LedgerTransport],
        profile: ConnectionProfile,
        wallet: Wallet,
        *,
        discovery: DiscoveryOptions | None = None,
        timeouts: GatewayTimeouts | None = None,
    ) -> None:
        self._transport_factory = transport_factory
        self._profile = profile
        self._wallet = wallet
        self._discovery = discovery
        self._timeouts = timeouts

    @activity.defn(name="submit_paper_transaction")
    async def submit_paper_transaction(self, inp: PaperTransactionInput) -> PaperTransactionOutput:
        """Submit (or evaluate) inp.request as inp.target.identity.

        Timeout: commit timeout + margin | Retries: none
        """
        activity.logger.info(
            "Paper %s %s as %s on %s",
            inp.request.name, "/".join(inp.request.args[:2]),
            inp.target.identity, inp.target.channel,
        )
        result = await submit_paper_transaction(
            self._transport_factory(),
            self._profile,
            self._wallet,
            inp.target,
            inp.request,
            discovery=self._discovery,
            timeouts=self._timeouts,
            commit_timeout_s=inp.commit_timeout_s,
            progress=lambda line: activity.logger.info("%s", line),
        )
        match result:
            case Ok(paper):
                return PaperTransactionOutput.committed(paper)
            case Err(failure):
                activity.logger.warning("Paper transaction %s", failure.message)
                return PaperTransactionOutput.failed(failure)
