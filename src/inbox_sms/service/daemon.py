"""Relay service daemon with APScheduler."""

import asyncio
import logging
import signal
from datetime import datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import Settings
from ..notifiers import Notifier, TextBeltNotifier
from ..processors.llm import Summarizer
from .relay import EmailRelay

logger = logging.getLogger(__name__)


class RelayService:
    """Background service that runs the relay on a fixed interval."""

    def __init__(self, settings: Settings, relay: EmailRelay | None = None) -> None:
        """Initialize the relay service.

        Args:
            settings: Application settings.
            relay: Pre-built relay; built from settings when omitted.
        """
        self.settings = settings
        self.scheduler = AsyncIOScheduler()
        self._running = False
        self._shutdown_event = asyncio.Event()
        self._last_run: datetime | None = None
        self._last_stats: dict[str, Any] | None = None

        self.relay = relay or EmailRelay(
            settings=settings,
            summarizer=self._create_summarizer(),
            notifier=self._create_notifier(),
        )

    def _create_summarizer(self) -> Summarizer | None:
        if not self.settings.monitor.summarize:
            return None
        try:
            api_key = (
                self.settings.anthropic_api_key if self.settings.llm.provider == "anthropic" else None
            )
            return Summarizer(self.settings.llm, api_key, self.settings.summary)
        except Exception as e:
            logger.warning(f"Could not initialize summarizer: {e}")
            return None

    def _create_notifier(self) -> Notifier | None:
        # Missing SMS settings raise ValueError while notify is on
        if not self.settings.monitor.notify:
            return None
        return TextBeltNotifier(self.settings.sms)

    def _setup_jobs(self) -> None:
        """Set up scheduled jobs."""
        interval = self.settings.service.polling_interval
        self.scheduler.add_job(
            self._run_relay_job,
            trigger=IntervalTrigger(seconds=interval),
            id="relay",
            name="Mailbox Relay",
            replace_existing=True,
            max_instances=1,
        )
        logger.info(f"Scheduled relay job every {interval} seconds")

    async def _run_relay_job(self) -> None:
        """Execute one relay cycle."""
        logger.debug("Running relay job")
        try:
            stats = await self.relay.run_cycle()
            self._last_run = datetime.now()
            self._last_stats = {k: v for k, v in stats.items() if k != "results"}
        except Exception as e:
            logger.error(f"Relay job failed: {e}")

    async def start(self) -> None:
        """Start the service daemon."""
        if self._running:
            logger.warning("Service is already running")
            return

        logger.info("Starting relay service")
        self._running = True
        self._shutdown_event.clear()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda: asyncio.create_task(self.stop()))

        self._setup_jobs()
        self.scheduler.start()

        await self._run_relay_job()

        logger.info("Relay service started")

        await self._shutdown_event.wait()

    async def stop(self) -> None:
        """Stop the service daemon gracefully."""
        if not self._running:
            return

        logger.info("Stopping relay service")
        self._running = False

        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)

        self._shutdown_event.set()
        logger.info("Relay service stopped")

    async def run_once(self, *, dry_run: bool = False, limit: int | None = None) -> dict[str, Any]:
        """Run a single relay cycle without starting the daemon.

        Useful for cron-based scheduling.
        """
        stats = await self.relay.run_cycle(dry_run=dry_run, limit=limit)
        self._last_run = datetime.now()
        return stats

    def get_status(self) -> dict[str, Any]:
        """Get the current service status."""
        status: dict[str, Any] = {
            "running": self._running,
            "scheduler_running": self.scheduler.running,
            "last_run": self._last_run.isoformat() if self._last_run else None,
            "last_stats": self._last_stats,
            "config": {
                "polling_interval": self.settings.service.polling_interval,
                "batch_size": self.settings.monitor.batch_size,
                "summarize": self.relay.summarizer is not None,
                "notify": self.relay.notifier is not None,
            },
        }

        if self._running and self.scheduler.running:
            status["next_run"] = None
            job = self.scheduler.get_job("relay")
            if job and job.next_run_time:
                status["next_run"] = job.next_run_time.isoformat()

        return status
