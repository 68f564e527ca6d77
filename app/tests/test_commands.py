"""Tests for individual command behaviour."""
from datetime import datetime, timedelta, timezone

import yaml

from launcharr.core.models import HealthCheck, HistoryEntry, QueueEntry, SeriesStatistics
from launcharr.core.status import ConnectionState

from conftest import FIXED_NOW, make_entry, make_series


def _fail_save(*args, **kwargs):
    raise OSError("read-only file system")


class TestLibrarySearch:
    def test_prompt_when_empty(self, dispatcher):
        assert dispatcher.dispatch("-l")[0].title == "Enter Search Term"

    def test_subtitle_and_activation(self, dispatcher, fake_client):
        fake_client.series = [make_series(1, "The Office", network="NBC", status="ended")]
        result = dispatcher.dispatch("-l office")[0]
        assert result.subtitle == "NBC | ended | 2 Seasons | 10/20 Episodes"
        assert result.activate() is True
        assert fake_client.opened == ["series/the-office"]

    def test_no_episodes(self, dispatcher, fake_client):
        fake_client.series = [make_series(1, "New Show", statistics=SeriesStatistics(season_count=1))]
        assert dispatcher.dispatch("new")[0].subtitle.endswith("No Episodes")


class TestCalendar:
    def test_groups_by_day(self, dispatcher, fake_client):
        fake_client.calendar = [
            make_entry(2, "Zeta", FIXED_NOW + timedelta(hours=1), id=1),
            make_entry(1, "Alpha", FIXED_NOW - timedelta(hours=1), id=2),
            make_entry(3, "Beta", FIXED_NOW + timedelta(days=1), id=3),
        ]
        titles = [r.title for r in dispatcher.dispatch("-c week")]
        assert titles == [
            "📅 Today", "📅 Alpha", "📅 Zeta",
            "📅 Tomorrow", "📅 Beta",
            "Open Calendar in Browser",
        ]

    def test_episode_scores_descend(self, dispatcher, fake_client):
        fake_client.calendar = [make_entry(i, f"S{i}", FIXED_NOW) for i in range(1, 4)]
        results = dispatcher.dispatch("-c today")
        assert [r.score for r in results if r.context is not None] == [100, 99, 98]
        assert results[-1].score == 80

    def test_empty_window(self, dispatcher, fake_client):
        results = dispatcher.dispatch("-c tomorrow")
        assert results[0].title == "No Episodes Found"
        start, end = fake_client.calendar_calls[0]
        assert start == datetime(2024, 5, 16)
        assert end == datetime(2024, 5, 16, 23, 59, 59)

    def test_unrepresentable_air_date_is_grouped_as_unknown(self, dispatcher, fake_client):
        fake_client.calendar = [
            make_entry(1, "Sentinel", datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5)))),
            make_entry(2, "Alpha", FIXED_NOW),
        ]
        titles = [r.title for r in dispatcher.dispatch("-c today")]
        assert titles[:4] == ["📅 Today", "📅 Alpha", "📅 Unknown Air Date", "📅 Sentinel"]

    def test_options_hint_without_argument(self, dispatcher):
        assert dispatcher.dispatch("-c")[0].title == "Calendar Options"


class TestActivity:
    def test_queue_only(self, dispatcher, fake_client):
        fake_client.queue = [QueueEntry(title="Show", status="downloading", progress=42.0, quality="WEB")]
        results = dispatcher.dispatch("-a q")
        assert results[0].title == "⬇️ Show"
        assert "(42.0%)" in results[0].subtitle
        assert results[-1].title == "Open Activity in Browser"

    def test_empty_queue(self, dispatcher):
        assert dispatcher.dispatch("-a queue")[0].title == "No Active Downloads"

    def test_empty_history(self, dispatcher):
        assert dispatcher.dispatch("-a h")[0].title == "No Recent Activity"

    def test_default_lists_queue_then_history(self, dispatcher, fake_client):
        fake_client.queue = [QueueEntry(title="Q")]
        fake_client.history = [HistoryEntry(title="H", event_type="grabbed")]
        titles = [r.title for r in dispatcher.dispatch("-a")]
        assert titles == ["Activity Options", "⬇️ Q", "⬇️ H", "Open Activity in Browser"]

    def test_nothing_at_all(self, dispatcher):
        titles = [r.title for r in dispatcher.dispatch("-a")]
        assert "No Activity Found" in titles


class TestRefreshCommand:
    def test_menu(self, dispatcher):
        titles = [r.title for r in dispatcher.dispatch("-r")]
        assert titles[0] == "Refresh All Series"
        assert titles[-1] == "Refresh Options"
        assert "Refresh Options" not in [r.title for r in dispatcher.dispatch("-r all")]

    def test_acknowledgement_submits_on_activation(self, dispatcher, fake_client):
        fake_client.calendar = [make_entry(8, "Show")]
        results = dispatcher.dispatch("-r c")
        assert len(results) == 1
        assert fake_client.rescanned == []
        assert results[0].activate() is True
        assert fake_client.rescanned == [8]

    def test_prior_days_argument(self, dispatcher, fake_client):
        result = dispatcher.dispatch("-r 3")[0]
        assert result.title == "Refresh Prior 3 Days Calendar Series"
        result.activate()
        assert fake_client.calendar_calls[-1] == (datetime(2024, 5, 12), datetime(2024, 5, 15))

    def test_zero_days_rejected(self, dispatcher):
        result = dispatcher.dispatch("-r 0")[0]
        assert "Days back must be 1 or greater" in result.subtitle

    def test_series_term(self, dispatcher, fake_client):
        fake_client.series = [make_series(i, f"Show {i}") for i in range(12)]
        results = dispatcher.dispatch("-r show")
        assert len(results) == 11
        assert results[0].title == "Refresh: Show 0"
        assert results[-1].title == "Refresh All Series"
        assert results[-1].score == 50
        results[1].activate()
        assert fake_client.rescanned == [1]

    def test_series_not_found(self, dispatcher):
        assert dispatcher.dispatch("-r nothing")[0].title == "No Series Found"


class TestHealth:
    def test_healthy(self, dispatcher):
        titles = [r.title for r in dispatcher.dispatch("-s")]
        assert titles == ["🔄 Test All Health Checks", "✅ All Systems Healthy", "🌐 Open System Status"]

    def test_issues_sorted_by_severity(self, dispatcher, fake_client):
        fake_client.health = [
            HealthCheck(source="Info", type="info"),
            HealthCheck(source="UpdateCheck", type="warning"),
            HealthCheck(source="Disk", type="error"),
        ]
        results = dispatcher.dispatch("-s")
        assert results[1].title == "⚠️ Found 3 Health Issues"
        assert [r.title for r in results[2:5]] == ["❌ Disk", "⚠️ UpdateCheck", "ℹ️ Info"]
        results[3].activate()
        results[2].activate()
        assert fake_client.commands == ["ApplicationCheckUpdate", "CheckHealth"]


class TestSetup:
    def test_short_key_warns(self, dispatcher, settings):
        results = dispatcher.dispatch("-setup apikey short")
        assert results[0].title == "⚠️ API Key Seems Too Short"
        assert results[1].activate() is True
        assert settings.sonarr.api_key == "short"

    def test_good_key_saves_and_resets_status(self, dispatcher, settings, probe):
        probe.record_result(False, "old", FIXED_NOW)
        key = "f" * 32
        result = dispatcher.dispatch(f"-setup apikey {key}")[0]
        assert result.title == "✅ API Key Looks Good!"
        result.activate()
        with open(settings.path) as f:
            assert yaml.safe_load(f)["sonarr"]["api_key"] == key
        assert probe.status.state is ConnectionState.UNKNOWN

    def test_server_strips_protocol(self, dispatcher, settings):
        result = dispatcher.dispatch("-setup server https://nas:8989/")[0]
        assert result.subtitle == "Select to save: nas:8989"
        result.activate()
        assert settings.sonarr.server_url == "nas:8989"

    def test_protocol_toggles_immediately(self, dispatcher, settings):
        dispatcher.dispatch("-setup https")
        assert settings.sonarr.use_https is True
        dispatcher.dispatch("-setup http")
        assert settings.sonarr.use_https is False

    def test_failed_save_restores_protocol(self, dispatcher, settings, monkeypatch):
        monkeypatch.setattr("launcharr.config.save_config", _fail_save)
        results = dispatcher.dispatch("-setup https")
        assert results[0].title == "❌ Could not save settings"
        assert settings.sonarr.use_https is False

    def test_failed_save_restores_api_key(self, dispatcher, settings, monkeypatch):
        monkeypatch.setattr("launcharr.config.save_config", _fail_save)
        key = "f" * 32
        assert dispatcher.dispatch(f"-setup apikey {key}")[0].activate() is False
        assert settings.sonarr.api_key != key

    def test_unknown_shows_help(self, dispatcher):
        assert dispatcher.dispatch("-setup what")[0].title == "🔧 Setup Commands"

    def test_wizard_without_key(self, dispatcher, settings):
        settings.sonarr.api_key = ""
        titles = [r.title for r in dispatcher.dispatch("-setup")]
        assert "🔑 Step 1: Enter API Key" in titles


class TestUtility:
    def test_connection_records_into_probe(self, dispatcher, fake_client, probe):
        fake_client.connectivity = (False, "HTTP 500 from sonarr.local:8989")
        result = dispatcher.dispatch("-test connection")[-1]
        assert result.activate() is False
        assert probe.status.last_error == "HTTP 500 from sonarr.local:8989"

    def test_settings_alias_opens_file(self, dispatcher, fake_client, settings):
        result = dispatcher.dispatch("-settings settings")[-1]
        assert result.subtitle == settings.path
        result.activate()
        assert fake_client.opened[-1].startswith("file://")

    def test_reload(self, dispatcher, settings):
        from launcharr.config import save_config
        save_config(settings)
        settings.sonarr.server_url = "changed:1"
        dispatcher.dispatch("-util reload")[-1].activate()
        assert settings.sonarr.server_url == "sonarr.local:8989"

    def test_connection_subtitle_shows_configured_timeout(self, dispatcher, settings):
        settings.probe.timeout_seconds = 12
        assert dispatcher.dispatch("-test connection")[-1].subtitle.endswith("(12s timeout)")

    def test_open_settings_failure_is_contained(self, dispatcher, settings, tmp_path, monkeypatch):
        settings.path = str(tmp_path / "absent.yaml")
        monkeypatch.setattr("launcharr.config.save_config", _fail_save)
        assert dispatcher.dispatch("-settings settings")[-1].activate() is False

    def test_reload_failure_is_contained(self, dispatcher, monkeypatch):
        monkeypatch.setattr("launcharr.config.reload_into", _fail_save)
        assert dispatcher.dispatch("-util reload")[-1].activate() is False

    def test_unknown(self, dispatcher):
        assert dispatcher.dispatch("-test bogus")[-1].title == "❓ Unknown Utility Command"


class TestDateTime:
    def test_overview(self, dispatcher):
        titles = [r.title for r in dispatcher.dispatch("-date")]
        assert titles[0] == "🕒 Current Local Time"
        assert "⏱️ Unix Timestamp" in titles

    def test_zones(self, dispatcher):
        results = dispatcher.dispatch("-time time")
        assert results[0].title == "🌐 World Time Zones"
        assert len(results) > 1

    def test_unknown_zone(self, dispatcher):
        assert dispatcher.dispatch("-date time Mars/Olympus")[-1].title == "❓ Unknown Time Zone"

    def test_convert(self, dispatcher):
        subtitles = {r.title: r.subtitle for r in dispatcher.dispatch("-date convert")}
        assert subtitles["📆 Tomorrow"] == "Thursday, May 16, 2024 (1 days)"
        assert subtitles["📆 Next Month"].startswith("Saturday, June 15, 2024")


class TestExternalLinks:
    def test_tvdb_alias(self, dispatcher, fake_client):
        result = dispatcher.dispatch("-tvdb breaking bad")[0]
        result.activate()
        assert fake_client.opened == ["https://thetvdb.com/search?query=breaking+bad"]

    def test_imdb_via_link(self, dispatcher):
        assert dispatcher.dispatch("-link imdb the wire")[0].context == (
            "https://www.imdb.com/find?q=the+wire&s=tt&ttype=tv")

    def test_reddit_search(self, dispatcher):
        assert dispatcher.dispatch("-reddit calendar")[0].context == (
            "https://www.reddit.com/r/sonarr/search?q=calendar&restrict_sr=1")

    def test_docs(self, dispatcher):
        urls = [r.context for r in dispatcher.dispatch("-link docs")]
        assert "https://wiki.servarr.com/sonarr" in urls
        assert "https://sonarr.tv/docs/api/" in urls


class TestHelpAndAbout:
    def test_help_lists_commands_and_shortcuts(self, dispatcher):
        titles = [r.title for r in dispatcher.dispatch("-help")]
        assert any(t.startswith("-test / -settings / -util") for t in titles)
        assert "-n (shortcut)" in titles
        assert "-y (shortcut)" in titles

    def test_help_warns_when_unconfigured(self, dispatcher, settings):
        settings.sonarr.api_key = ""
        assert dispatcher.dispatch("-help")[0].title == "⚠️ Sonarr API Key Not Set"

    def test_about(self, dispatcher, settings):
        subtitles = {r.title: r.subtitle for r in dispatcher.dispatch("-about")}
        assert subtitles["📁 Settings File"] == settings.path
        assert "2024-05-15 to 2024-05-22" in subtitles["📅 Calendar Windows"]
