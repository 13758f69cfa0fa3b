import inspect
import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.app.services.scheduler import IScheduler, Job, PeriodicTask

logger = logging.getLogger(__name__)


class APSchedulerTask(PeriodicTask):
    def __init__(self, scheduler: AsyncIOScheduler, name: str):
        self._scheduler = scheduler
        self.name = name

    def cancel(self) -> None:
        try:
            self._scheduler.remove_job(self.name)
        except JobLookupError:
            pass


class APSchedulerScheduler(IScheduler):
    """
    IScheduler on APScheduler's AsyncIOScheduler.

    Jobs are wrapped in coroutines so they execute on the event loop
    thread rather than in the executor's thread pool. Coroutine jobs are
    awaited.
    """

    def __init__(self, scheduler: AsyncIOScheduler = None):
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    def every(self, name: str, seconds: int, func: Job) -> PeriodicTask:
        async def run():
            result = func()
            if inspect.isawaitable(result):
                await result

        self.scheduler.add_job(
            run,
            trigger=IntervalTrigger(seconds=seconds),
            id=name,
            name=name,
            replace_existing=True,
            misfire_grace_time=60,
        )
        logger.info(f"Scheduled job {name} every {seconds}s")
        return APSchedulerTask(self.scheduler, name)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.remove_all_jobs()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
