# app/launcharr/core/results.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

log = logging.getLogger(__name__)

DEFAULT_ICON = "icon.png"
ERROR_SCORE = 1000


@dataclass
class Result:
    """One display row handed back to the host."""
    title: str
    subtitle: str = ""
    icon: str = DEFAULT_ICON
    score: int = 0
    action: Optional[Callable[[], bool]] = None
    context: Any = None

    def activate(self) -> bool:
        """Run the action; returns whether the host should close."""
        if self.action is None:
            return False
        return bool(self.action())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "icon": self.icon,
            "score": self.score,
            "actionable": self.action is not None,
        }


def error_result(title: str, detail: str = "") -> Result:
    return Result(title=f"❌ {title}", subtitle=detail, score=ERROR_SCORE)


def setup_guidance() -> List[Result]:
    """Guidance shown by API commands when no key is configured."""
    return [
        Result(
            title="🔧 Setup Required: Sonarr API Key Not Set",
            subtitle="Type 'snr -setup' to configure your Sonarr connection",
            score=100,
        ),
        Result(
            title="⚙️ Alternative: Edit the Settings File",
            subtitle="Set sonarr.api_key in settings.yaml or export SONARR_API_KEY",
            score=95,
        ),
        Result(
            title="❓ How to Find Your API Key",
            subtitle="In Sonarr: Settings → General → API Key (copy the long string)",
            score=90,
        ),
        Result(
            title="📖 Quick Start Guide",
            subtitle="1) -setup apikey YOUR_KEY  2) -setup server host:port  3) -test connection",
            score=85,
        ),
    ]


def run_action(label: str, fn: Callable[[], Any], close: bool = True) -> Callable[[], bool]:
    """Wrap a side effect as a result action that logs and never raises."""
    def _action() -> bool:
        try:
            fn()
        except Exception as e:
            log.error("Action '%s' failed: %s", label, e)
            return False
        return close
    return _action
