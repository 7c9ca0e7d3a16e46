"""
Backlog gap analysis
Decides, per series season, whether missing episodes are searched one by one
or as a whole season, and dispatches the resulting search commands
"""

import logging
from collections import defaultdict
from typing import Iterable, List

from .errors import SearchDispatchError
from .interfaces import Library, SearchDispatcher, SeasonState
from .models import (
    Episode,
    EpisodeSearch,
    SearchCommand,
    SeasonGapGroup,
    SeasonSearch,
    SweepResult,
)

logger = logging.getLogger(__name__)


def group_by_season(episodes: Iterable[Episode]) -> List[SeasonGapGroup]:
    """Bucket episodes by (series, season), ordered by series then season"""
    buckets: dict[tuple[int, int], list[Episode]] = defaultdict(list)
    for episode in episodes:
        buckets[(episode.series_id, episode.season_number)].append(episode)

    return [
        SeasonGapGroup(
            series_id=series_id,
            season_number=season_number,
            episodes=sorted(buckets[(series_id, season_number)], key=lambda ep: ep.episode_number),
        )
        for series_id, season_number in sorted(buckets)
    ]


def _episode_search(episode: Episode) -> EpisodeSearch:
    return EpisodeSearch(
        episode_id=episode.id,
        series_id=episode.series_id,
        season_number=episode.season_number,
        episode_number=episode.episode_number,
    )


class BacklogAnalyzer:
    """
    Chooses search granularity for missing episodes

    A season search is only issued when the missing episode numbers are exactly
    the season's episode numbers. Matching counts with different members, or a
    partial gap, fall back to one search per episode.
    """

    def __init__(self, seasons: SeasonState, logger: logging.Logger | None = None):
        self.seasons = seasons
        self.logger = logger or logging.getLogger(__name__)

    def analyze(self, missing_episodes: Iterable[Episode]) -> List[SearchCommand]:
        commands: List[SearchCommand] = []

        for group in group_by_season(missing_episodes):
            commands.extend(self._commands_for_group(group))

        return commands

    def _commands_for_group(self, group: SeasonGapGroup) -> List[SearchCommand]:
        if len(group.episodes) == 1:
            return [_episode_search(group.episodes[0])]

        missing = group.missing_episode_numbers
        total = set(
            self.seasons.episode_numbers_of_season(group.series_id, group.season_number)
        )

        if missing == total:
            self.logger.debug(
                f"Series {group.series_id} season {group.season_number}: "
                f"all {len(total)} episodes missing, searching whole season"
            )
            return [SeasonSearch(group.series_id, group.season_number)]

        if len(missing) == len(total):
            self.logger.debug(
                f"Series {group.series_id} season {group.season_number}: "
                "missing episodes don't match season episodes, searching individually"
            )
        else:
            self.logger.debug(
                f"Series {group.series_id} season {group.season_number}: "
                f"{len(missing)} of {len(total)} episodes missing, searching individually"
            )

        return [_episode_search(ep) for ep in group.episodes]


class BacklogSweep:
    """Loads the backlog, analyses it and hands commands to a dispatcher"""

    def __init__(
        self,
        library: Library,
        dispatcher: SearchDispatcher,
        analyzer: BacklogAnalyzer | None = None,
        logger: logging.Logger | None = None,
    ):
        self.library = library
        self.dispatcher = dispatcher
        self.logger = logger or logging.getLogger(__name__)
        self.analyzer = analyzer or BacklogAnalyzer(library, self.logger)

    def plan(self) -> List[SearchCommand]:
        missing = self.library.episodes_without_files(monitored_only=True)
        self.logger.info(f"Backlog contains {len(missing)} missing episode(s)")
        return self.analyzer.analyze(missing)

    def run(self, dry_run: bool = False) -> SweepResult:
        return self.dispatch_all(self.plan(), dry_run=dry_run)

    def dispatch_all(self, commands: List[SearchCommand], dry_run: bool = False) -> SweepResult:
        """Dispatch commands one by one, collecting failures"""
        result = SweepResult()

        for command in commands:
            if dry_run:
                self.logger.info(f"DRY RUN: would dispatch {command}")
                result.filtered += 1
                continue

            try:
                self.dispatcher.dispatch(command)
                result.dispatched += 1
            except Exception as e:
                result.failures.append(SearchDispatchError(command, e))
                self.logger.error(f"Failed to dispatch {command}: {e}")

        self.logger.info(
            f"Backlog sweep finished: {result.dispatched} search(es) dispatched, "
            f"{len(result.failures)} failure(s)"
        )
        return result
