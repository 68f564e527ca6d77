# app/launcharr/core/notifier.py
import logging
import os

import requests

log = logging.getLogger(__name__)


def post_discord(content: str, webhook: str | None = None) -> bool:
    url = webhook or os.getenv("DISCORD_WEBHOOK", "")
    if not url:
        log.debug("No DISCORD_WEBHOOK; skipping notification")
        return False
    try:
        r = requests.post(url, json={"content": content}, timeout=10)
        log.debug("Discord response: %s", r.status_code)
        return r.ok
    except requests.RequestException as e:
        log.warning("Discord error: %s", e)
        return False


def notify_refresh(result, settings, label: str = "Refresh") -> bool:
    """Post a finished refresh summary when a webhook is configured and enabled."""
    notif = settings.notifications
    if not notif.enabled or not notif.discord_webhook:
        return False
    icon = "✅" if result.success and not result.failed_series else "⚠️"
    return post_discord(f"{icon} **{label}**: {result.message}", notif.discord_webhook)
