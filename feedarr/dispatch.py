"""
Search dispatch for backlog commands
"""

import logging

from .models import EpisodeSearch, SearchCommand, SeasonSearch
from .sonarr import SonarrClient

logger = logging.getLogger(__name__)


class SonarrSearchDispatcher:
    """Sends search commands to Sonarr's command API"""

    def __init__(self, client: SonarrClient):
        self.client = client

    def dispatch(self, command: SearchCommand) -> None:
        if isinstance(command, SeasonSearch):
            self.client.search_season(command.series_id, command.season_number)
        elif isinstance(command, EpisodeSearch):
            self.client.search_episodes([command.episode_id])
        else:
            raise TypeError(f"Unsupported search command: {command!r}")
