"""Mailbox-to-SMS relay cycle."""

import logging
from datetime import datetime
from typing import Any

from ..config import Settings
from ..models import Email, RelayResult, RuleSet
from ..notifiers.base import Notifier
from ..processors.content import extract_text
from ..processors.llm import Summarizer
from ..processors.rules import classify, describe_result
from ..sources.base import EmailSource
from ..sources.gmail import GmailSource
from ..utils.text import clean_for_summary, first_lines

logger = logging.getLogger(__name__)


class EmailRelay:
    """Polls a mailbox, filters messages and relays accepted ones."""

    def __init__(
        self,
        settings: Settings,
        source: EmailSource | None = None,
        summarizer: Summarizer | None = None,
        notifier: Notifier | None = None,
        rules: RuleSet | None = None,
    ) -> None:
        """Initialize the relay.

        Args:
            settings: Application settings.
            source: Mailbox to poll. Defaults to Gmail from settings.
            summarizer: Optional summarizer; without one the leading lines
                of the message are sent.
            notifier: Notifier for accepted messages. Required when
                ``monitor.notify`` is on; without one accepted messages
                are recorded as errors and left unmarked.
            rules: Rule set override. Defaults to ``settings.rules``.
        """
        self.settings = settings
        self.config = settings.monitor
        self.source = source or GmailSource(settings.gmail)
        self.summarizer = summarizer
        self.notifier = notifier
        self.rules = rules if rules is not None else settings.rules

    async def _summarize(self, content: str, sender: str) -> str:
        if self.config.summarize and self.summarizer:
            return await self.summarizer.summarize(content, sender)
        return first_lines(clean_for_summary(content), self.settings.summary.short_lines)

    async def process_email(self, email: Email, *, dry_run: bool = False) -> RelayResult:
        """Process a single email.

        Extracts the body, classifies it and, when accepted, summarizes,
        notifies and marks the message processed. Failures are recorded on
        the result; the message stays unmarked and is retried next cycle.

        Args:
            email: The email to process.
            dry_run: If True, only classify.

        Returns:
            RelayResult describing what happened.
        """
        result = RelayResult(
            email_id=email.id,
            from_addr=email.from_addr,
            subject=email.subject or "(no subject)",
            dry_run=dry_run,
        )

        content = extract_text(email.body)
        classification = classify(email.from_addr, email.subject, content, self.rules)
        result.classification = classification
        logger.info(f"{email.id} from {email.from_addr!r}: {describe_result(classification)}")

        if not classification.accepted or dry_run:
            return result

        try:
            result.summary = await self._summarize(content, email.from_addr)
        except Exception as e:
            logger.error(f"Error summarizing {email.id}: {e}")
            result.errors.append(f"Summary error: {e}")
            result.success = False
            return result

        if self.config.notify:
            if self.notifier is None:
                logger.error(f"Cannot notify about {email.id}: no notifier configured")
                result.errors.append("Notification error: no notifier configured")
                result.success = False
                return result
            try:
                await self.notifier.send(result.summary, email.from_addr)
                result.notified = True
                logger.debug(f"Notified about {email.id} via {self.notifier.channel}")
            except Exception as e:
                logger.error(f"Error notifying about {email.id}: {e}")
                result.errors.append(f"Notification error: {e}")
                result.success = False
                return result

        try:
            result.marked_processed = await self.source.mark_processed(email.id)
        except Exception as e:
            logger.error(f"Error marking {email.id} as processed: {e}")
            result.errors.append(f"Mark processed error: {e}")
            result.success = False

        return result

    async def run_cycle(self, *, dry_run: bool = False, limit: int | None = None) -> dict[str, Any]:
        """Run a complete relay cycle.

        Connects to the source, fetches unprocessed messages and processes
        them in the order the source returned them.

        Returns:
            Dict with cycle statistics and the per-message results.
        """
        cycle_start = datetime.now()
        results: list[RelayResult] = []
        stats: dict[str, Any] = {
            "started_at": cycle_start.isoformat(),
            "emails_found": 0,
            "emails_accepted": 0,
            "emails_rejected": 0,
            "emails_blocked": 0,
            "emails_notified": 0,
            "errors": 0,
            "dry_run": dry_run,
        }

        try:
            async with self.source:
                if limit is None:
                    limit = self.config.batch_size
                emails = await self.source.fetch_unprocessed(limit)
                stats["emails_found"] = len(emails)

                for email in emails:
                    try:
                        result = await self.process_email(email, dry_run=dry_run)
                    except Exception as e:
                        logger.error(f"Error processing email {email.id}: {e}")
                        stats["errors"] += 1
                        continue

                    results.append(result)
                    if result.accepted:
                        stats["emails_accepted"] += 1
                    else:
                        stats["emails_rejected"] += 1
                    if result.classification and result.classification.rejected_by_blacklist:
                        stats["emails_blocked"] += 1
                    if result.notified:
                        stats["emails_notified"] += 1
                    stats["errors"] += len(result.errors)

        except Exception as e:
            logger.error(f"Error in relay cycle: {e}")
            stats["errors"] += 1

        stats["duration_seconds"] = (datetime.now() - cycle_start).total_seconds()
        stats["results"] = results
        logger.info(
            f"Relay cycle complete: {stats['emails_found']} found, "
            f"{stats['emails_accepted']} accepted, {stats['emails_notified']} notified, "
            f"{stats['errors']} errors"
        )

        return stats
