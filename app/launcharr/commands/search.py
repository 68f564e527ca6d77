# app/launcharr/commands/search.py
from __future__ import annotations

from typing import List

from launcharr.commands.base import Command
from launcharr.core.models import Query, Series
from launcharr.core.results import DEFAULT_ICON, Result, run_action


def series_subtitle(show: Series) -> str:
    stats = show.statistics
    if stats.total_episode_count > 0:
        episodes = f"{stats.episode_file_count}/{stats.total_episode_count} Episodes"
    else:
        episodes = "No Episodes"
    return f"{show.network} | {show.status} | {stats.season_count} Seasons | {episodes}"


class LibrarySearchCommand(Command):
    """Default command: anything that isn't a known flag is a library search."""
    flag = "-l"
    name = "Search Sonarr Library"
    description = "Search for shows in your Sonarr library"
    usage = "<search term>"

    def run(self, query: Query) -> List[Result]:
        term = self.argument(query)
        if not term:
            return [Result(
                title="Enter Search Term",
                subtitle=f"Type your search query after {self.flag}",
                score=100,
            )]

        shows = self.client.search_series(term)
        if not shows:
            return [Result(
                title="No Results Found",
                subtitle=f"No shows found matching '{term}'",
                score=100,
            )]

        return [
            Result(
                title=show.title,
                subtitle=series_subtitle(show),
                icon=show.poster_url or DEFAULT_ICON,
                score=100,
                action=run_action(f"open {show.title}",
                                  lambda slug=show.title_slug or show.id: self.client.open_series(slug)),
                context=show,
            )
            for show in shows
        ]
