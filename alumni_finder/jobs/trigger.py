"""Workflow trigger interface, implementations and the background dispatcher.

The trigger hands a job's batch to the external search workflow. Dispatch is
fire-and-forget: its outcome never affects the job-creation response.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Optional, Set

import httpx

from alumni_finder.jobs.models import JobRecord, completion_fields
from alumni_finder.jobs.store import JobStore
from alumni_finder.logger import get_logger

logger = get_logger(__name__)

SECRET_HEADER = "X-N8N-Secret"


class WorkflowTrigger(ABC):
    """Abstract interface for starting the external search workflow."""

    @abstractmethod
    async def trigger(self, job: JobRecord) -> None:
        """Hand the job's input batch to the workflow."""
        ...


class N8nWorkflowTrigger(WorkflowTrigger):
    """POSTs ``{jobId, names}`` to the configured workflow webhook."""

    def __init__(
        self,
        url: str,
        secret: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._secret = secret
        self._timeout = timeout
        self._transport = transport

    async def trigger(self, job: JobRecord) -> None:
        payload = {
            "jobId": job.id,
            "names": [n.model_dump() for n in job.input_names],
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                self._url,
                json=payload,
                headers={SECRET_HEADER: self._secret},
            )
            response.raise_for_status()
        logger.info("Workflow triggered for job %s (%d names)", job.id, len(job.input_names))


def simulated_results(job: JobRecord) -> list:
    """Synthetic search results used when no workflow is configured."""
    return [
        {
            "name": n.name,
            "school": n.school,
            "linkedInUrl": "https://linkedin.com/in/" + "".join(n.name.lower().split()),
            "confidence": random.randint(60, 99),
        }
        for n in job.input_names
    ]


class SimulatedWorkflowTrigger(WorkflowTrigger):
    """Local stand-in: completes the job with synthetic results after a delay."""

    def __init__(self, job_store: JobStore, delay_seconds: float = 3.0):
        self._job_store = job_store
        self._delay = delay_seconds

    async def trigger(self, job: JobRecord) -> None:
        await asyncio.sleep(self._delay)
        await self._job_store.update(job.id, completion_fields(simulated_results(job)))
        logger.info("Simulated workflow completed job %s", job.id)


class BackgroundDispatcher:
    """Runs triggers as tracked asyncio tasks so requests never wait on them."""

    def __init__(self, trigger: WorkflowTrigger):
        self._trigger = trigger
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, job: JobRecord) -> asyncio.Task:
        task = asyncio.create_task(self._run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, job: JobRecord) -> None:
        try:
            await self._trigger.trigger(job)
        except Exception as e:
            # The job stays pending; the timeout reaper is the backstop.
            logger.error("Error triggering workflow for job %s: %s", job.id, e)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def stop(self) -> None:
        """Cancel in-flight triggers on shutdown."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


def build_trigger(
    webhook_url: str,
    webhook_secret: str,
    job_store: JobStore,
    timeout: float = 10.0,
    simulated_delay: float = 3.0,
) -> WorkflowTrigger:
    if webhook_url:
        return N8nWorkflowTrigger(webhook_url, webhook_secret, timeout=timeout)
    logger.warning("No workflow webhook configured; using simulated completion")
    return SimulatedWorkflowTrigger(job_store, delay_seconds=simulated_delay)
