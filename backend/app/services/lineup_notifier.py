"""Lineup publish notifier.

Fire-and-forget trigger telling the outbound email service that a match
lineup was published. The email service owns recipients and templates; this
side only posts the match and team ids.
"""

import logging
import os
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class LineupNotifier:
    """
    Posts lineup-published events to a webhook.

    Reads configuration from environment variables:
      - LINEUP_PUBLISH_WEBHOOK_URL
      - LINEUP_PUBLISH_TIMEOUT_SECONDS (default 5)

    If no webhook URL is set, operates in dry-run mode
    (logs the event but doesn't send).
    """

    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        self.webhook_url = webhook_url if webhook_url is not None else os.getenv("LINEUP_PUBLISH_WEBHOOK_URL", "")
        if timeout is None:
            timeout = float(os.getenv("LINEUP_PUBLISH_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
        self.timeout = timeout
        self.dry_run = not self.webhook_url

        if self.dry_run:
            logger.warning(
                "Lineup publish webhook not configured. Running in dry-run mode. "
                "Set LINEUP_PUBLISH_WEBHOOK_URL."
            )

    def lineup_published(self, match_id: int, team_id: int) -> dict:
        """
        Send one lineup-published event.

        Returns:
            dict with keys: status, error

        Raises:
            requests.RequestException on transport errors or non-2xx responses
        """
        if self.dry_run:
            logger.info(f"[DRY RUN] Lineup published: match={match_id} team={team_id}")
            return {"status": "dry_run", "error": None}

        response = requests.post(
            self.webhook_url,
            json={"match_id": match_id, "team_id": team_id},
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.info(f"Lineup publish sent for match {match_id}: HTTP {response.status_code}")
        return {"status": "sent", "error": None}

    @property
    def is_configured(self) -> bool:
        return not self.dry_run


def notify_lineup_published(notifier: "LineupNotifier", match_id: int, team_id: int) -> dict:
    """Send the event, logging instead of raising. A failure here never touches the saved lineup."""
    try:
        return notifier.lineup_published(match_id, team_id)
    except Exception as e:
        logger.warning(f"Lineup publish notification failed for match {match_id}: {e}")
        return {"status": "failed", "error": str(e)}


# Singleton instance
_lineup_notifier: Optional[LineupNotifier] = None


def get_lineup_notifier() -> LineupNotifier:
    """Get or create the singleton LineupNotifier instance."""
    global _lineup_notifier
    if _lineup_notifier is None:
        _lineup_notifier = LineupNotifier()
    return _lineup_notifier
