"""Pytest configuration and fixtures for Launcharr tests."""
import os
import sys
import tempfile
from datetime import datetime
import pytest
from pathlib import Path

# Add app directory to path
app_dir = Path(__file__).parent.parent
sys.path.insert(0, str(app_dir))

# Add parent directory to path so 'services' is importable
parent_dir = app_dir.parent
sys.path.insert(0, str(parent_dir))

from launcharr.config import LaunchConfig, SonarrConfig
from launcharr.commands.base import CommandContext
from launcharr.core.models import CalendarEntry, HealthCheck, Series, SeriesStatistics
from launcharr.core.refresh import RefreshCoordinator
from launcharr.core.status import ConnectionProbe
from launcharr.core.tasks import BackgroundRunner
from launcharr.dispatcher import Dispatcher

API_KEY = "0123456789abcdef0123456789abcdef"
FIXED_NOW = datetime(2024, 5, 15, 20, 0, 0)


class FakeSonarrClient:
    """In-memory stand-in for SonarrClient that records every call."""

    def __init__(self, settings):
        self.settings = settings
        self.calendar = []
        self.series = []
        self.queue = []
        self.history = []
        self.health = []
        self.rescan_outcomes = {}
        self.calendar_error = None
        self.connectivity = (True, "Connected")
        self.calendar_calls = []
        self.rescanned = []
        self.opened = []
        self.commands = []

    def get_calendar(self, start, end):
        self.calendar_calls.append((start, end))
        if self.calendar_error:
            raise self.calendar_error
        return list(self.calendar)

    def rescan_series(self, series_id):
        self.rescanned.append(series_id)
        outcome = self.rescan_outcomes.get(series_id, True)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def rescan_all(self):
        self.commands.append("RescanSeries")
        return True

    def search_series(self, term):
        return [s for s in self.series if s.matches(term)]

    def get_queue(self, page_size=10):
        return list(self.queue)

    def get_history(self, page_size=10):
        return list(self.history)

    def get_health_checks(self):
        return list(self.health)

    def trigger_health_check(self):
        self.commands.append("CheckHealth")
        return True

    def retest_health_check(self, check):
        self.commands.append("ApplicationCheckUpdate" if check.is_update_check else "CheckHealth")
        return True

    def check_connectivity(self, timeout=5):
        return self.connectivity

    def ping(self):
        return self.connectivity[0]

    def open_url(self, url):
        self.opened.append(url)
        return True

    def open_series(self, slug_or_id):
        return self.open_url(f"series/{slug_or_id}")

    def open_calendar(self):
        return self.open_url("calendar")

    def open_activity(self):
        return self.open_url("activity")

    def open_system_status(self):
        return self.open_url("system/status")


def make_entry(series_id, title, air_date=None, **kwargs):
    return CalendarEntry(id=kwargs.pop("id", series_id * 100), series_id=series_id,
                         series_title=title, air_date=air_date, **kwargs)


def make_series(series_id, title, **kwargs):
    stats = kwargs.pop("statistics", SeriesStatistics(season_count=2, episode_file_count=10,
                                                      total_episode_count=20))
    return Series(id=series_id, title=title, title_slug=title.lower().replace(" ", "-"),
                  statistics=stats, **kwargs)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the real settings file and environment overrides."""
    for var in ("SONARR_API_KEY", "SONARR_URL", "SONARR_HTTPS", "LAUNCHARR_LOG_LEVEL", "DISCORD_WEBHOOK"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("LAUNCHARR_CONFIG", str(tmp_path / "settings.yaml"))
    yield


@pytest.fixture
def settings(tmp_path):
    """Configured settings persisted under a temp directory."""
    return LaunchConfig(
        sonarr=SonarrConfig(api_key=API_KEY, server_url="sonarr.local:8989"),
        path=str(tmp_path / "settings.yaml"),
    )


@pytest.fixture
def fake_client(settings):
    return FakeSonarrClient(settings)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def coordinator(fake_client, sleeps):
    return RefreshCoordinator(fake_client, delay_seconds=0.1, sleep=sleeps.append,
                              clock=lambda: FIXED_NOW)


@pytest.fixture
def runner():
    """Synchronous runner so background work completes before assertions."""
    return BackgroundRunner(synchronous=True)


@pytest.fixture
def probe():
    return ConnectionProbe(interval_seconds=60)


@pytest.fixture
def ctx(fake_client, settings, coordinator, runner, probe):
    return CommandContext(client=fake_client, settings=settings, coordinator=coordinator,
                          runner=runner, probe=probe)


@pytest.fixture
def dispatcher(ctx):
    return Dispatcher(ctx)


@pytest.fixture
def temp_config_file():
    """Create a temporary settings file for testing."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        config_content = """
sonarr:
  api_key: abcdefabcdefabcdefabcdefabcdefab
  server_url: https://media.example.com:8989/
  use_https: true
  request_timeout: 20

refresh:
  delay_seconds: 0.5
  overdue_buffer_minutes: 15

probe:
  interval_seconds: 120

log_level: DEBUG
"""
        f.write(config_content)
        config_path = f.name

    yield config_path

    # Cleanup
    if os.path.exists(config_path):
        os.unlink(config_path)


@pytest.fixture
def app(settings, fake_client, runner, probe, coordinator, ctx):
    """Flask host wired to the fake client."""
    from services.host import app as host_module

    host_module.reset_dispatcher(Dispatcher(ctx))
    host_module.app.config['TESTING'] = True

    yield host_module.app

    host_module.reset_dispatcher()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
