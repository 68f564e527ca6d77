# app/launcharr/commands/links.py
from __future__ import annotations

from typing import List
from urllib.parse import quote_plus

from launcharr.commands.base import Command
from launcharr.core.models import Query
from launcharr.core.results import Result, run_action

TVDB_HOME = "https://thetvdb.com/"
IMDB_HOME = "https://www.imdb.com/"
REDDIT_SONARR = "https://www.reddit.com/r/sonarr/"
SONARR_WIKI = "https://wiki.servarr.com/sonarr"
SONARR_API_DOCS = "https://sonarr.tv/docs/api/"
SONARR_HOME = "https://sonarr.tv/"
SONARR_GITHUB = "https://github.com/Sonarr/Sonarr"
PROJECT_GITHUB = "https://github.com/AtaraxyState/Sonarr-Explorer"


def tvdb_search_url(term: str) -> str:
    return f"https://thetvdb.com/search?query={quote_plus(term)}"


def imdb_search_url(term: str) -> str:
    return f"https://www.imdb.com/find?q={quote_plus(term)}&s=tt&ttype=tv"


def reddit_search_url(term: str) -> str:
    return f"https://www.reddit.com/r/sonarr/search?q={quote_plus(term)}&restrict_sr=1"


class ExternalLinksCommand(Command):
    flag = "-link"
    aliases = ("-tvdb", "-imdb", "-reddit")
    name = "External Links"
    description = "Quick access to external sites and searches"
    usage = "[tvdb|imdb|reddit <term>|docs|sonarr|github]"
    requires_credential = False

    def run(self, query: Query) -> List[Result]:
        text = query.text
        prefix = (self.matched_prefix(text) or self.flag).lower()
        arg = self.argument(query)

        # -tvdb / -imdb / -reddit take the rest of the query as the term
        if prefix != self.flag:
            return self._site(prefix.lstrip("-"), arg)

        kind, _, term = arg.partition(" ")
        kind = kind.lower()
        if not kind:
            return self._overview()
        if kind in ("tvdb", "imdb", "reddit"):
            return self._site(kind, term.strip())
        if kind == "docs":
            return self._docs()
        if kind == "sonarr":
            return self._sonarr()
        if kind == "github":
            return self._github()
        return [Result(title="❓ Unknown Link Type",
                       subtitle="Available: tvdb, imdb, reddit, docs, sonarr, github", score=100)]

    def _link(self, title: str, subtitle: str, url: str, score: int) -> Result:
        return Result(title=title, subtitle=subtitle, score=score,
                      action=run_action(f"open {url}", lambda: self.client.open_url(url)),
                      context=url)

    def _overview(self) -> List[Result]:
        return [
            Result(title="🔗 External Links & Searches",
                   subtitle="Quick access to databases and community resources", score=100),
            self._link("📺 TVDB Search", "snr -link tvdb [series name] - Search TheTVDB", TVDB_HOME, 95),
            self._link("🎬 IMDB Search", "snr -link imdb [series name] - Search Internet Movie Database",
                       IMDB_HOME, 94),
            self._link("🤖 r/Sonarr", "snr -link reddit - Open Sonarr subreddit", REDDIT_SONARR, 93),
            self._link("📖 Sonarr Wiki", "snr -link sonarr - Official Sonarr documentation", SONARR_WIKI, 92),
            self._link("💻 Launcharr GitHub", "snr -link github - Source code and issues", PROJECT_GITHUB, 91),
        ]

    def _site(self, site: str, term: str) -> List[Result]:
        if site == "tvdb":
            if not term:
                return [self._link("📺 TheTVDB", "The Television Database - Browse or search for series",
                                   TVDB_HOME, 100)]
            return [
                self._link(f"📺 Search TVDB for '{term}'", "Search TheTVDB for series information",
                           tvdb_search_url(term), 100),
                self._link("📺 Browse TVDB", "Open TheTVDB main page", TVDB_HOME, 90),
            ]
        if site == "imdb":
            if not term:
                return [self._link("🎬 Internet Movie Database", "IMDB - Browse movies and TV shows",
                                   IMDB_HOME, 100)]
            return [
                self._link(f"🎬 Search IMDB for '{term}'", "Search Internet Movie Database",
                           imdb_search_url(term), 100),
                self._link("🎬 Browse IMDB", "Open IMDB main page", IMDB_HOME, 90),
            ]
        results = [
            self._link("🤖 r/Sonarr", "Sonarr community subreddit - Help, tips, and discussions",
                       REDDIT_SONARR, 95),
            self._link("📱 r/usenet", "Usenet community and discussions", "https://www.reddit.com/r/usenet/", 90),
            self._link("🏠 r/homelab", "Home lab and self-hosting community",
                       "https://www.reddit.com/r/homelab/", 85),
        ]
        if term:
            results.insert(0, self._link(f"🔍 Search r/Sonarr for '{term}'", "Search within the Sonarr subreddit",
                                         reddit_search_url(term), 100))
        return results

    def _docs(self) -> List[Result]:
        return [
            self._link("📖 Launcharr Documentation", "Setup guide, features, and troubleshooting",
                       f"{PROJECT_GITHUB}#readme", 100),
            self._link("📚 Sonarr Wiki", "Official Sonarr documentation", SONARR_WIKI, 95),
            self._link("🔧 Sonarr API Docs", "Sonarr API documentation", SONARR_API_DOCS, 90),
        ]

    def _sonarr(self) -> List[Result]:
        return [
            self._link("🏠 Sonarr Homepage", "Official Sonarr website", SONARR_HOME, 100),
            self._link("📚 Sonarr Wiki", "Complete documentation and guides", SONARR_WIKI, 95),
            self._link("📂 Sonarr GitHub", "Source code and issue tracking", SONARR_GITHUB, 90),
        ]

    def _github(self) -> List[Result]:
        return [
            self._link("💻 Launcharr Repository", "Source code, issues, and contributions", PROJECT_GITHUB, 100),
            self._link("🐛 Report Issue", "Report bugs or request features", f"{PROJECT_GITHUB}/issues/new", 95),
            self._link("📋 View Issues", "Browse existing issues and discussions", f"{PROJECT_GITHUB}/issues", 90),
            self._link("📈 Releases", "View versions and changelog", f"{PROJECT_GITHUB}/releases", 85),
        ]
