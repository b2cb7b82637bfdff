"""Worker for the paper transaction workflow.

Usage::

    import asyncio
    from papernet.infra.sandbox import build_sandbox
    from papernet.workflow.activities import PaperActivities
    from papernet.workflow.worker import run_worker

    sandbox = build_sandbox()
    activities = PaperActivities(sandbox.network.transport, sandbox.profile, sandbox.wallet)
    asyncio.run(run_worker(activities))
"""

from __future__ import annotations

from temporalio.client import Client
from temporalio.worker import Worker

from papernet.infra.config import TemporalConfig
from papernet.workflow.activities import PaperActivities
from papernet.workflow.converter import PAPERNET_DATA_CONVERTER
from papernet.workflow.paper_workflow import PaperTransactionWorkflow


def build_worker(client: Client, activities: PaperActivities, task_queue: str) -> Worker:
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[PaperTransactionWorkflow],
        activities=[activities.submit_paper_transaction],
    )


async def run_worker(
    activities: PaperActivities,
    config: TemporalConfig | None = None,
) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    config = config or TemporalConfig()
    client = await Client.connect(
        config.target_host, namespace=config.namespace,
        data_converter=PAPERNET_DATA_CONVERTER,
    )
    await build_worker(client, activities, config.task_queue).run()
