"""
CLI configuration handler
"""

import sys
from pathlib import Path

from rich.console import Console

from .backlog import BacklogSweep
from .config import Config
from .dispatch import SonarrSearchDispatcher
from .feeds import RssFetcher
from .history import HistoryLedger, HistoryStore
from .indexers import build_indexers
from .library import SonarrLibrary
from .pipeline import FeedIngestionPipeline
from .quality import QualityPolicy
from .sabnzbd import SabnzbdClient
from .sonarr import SonarrClient

console = Console()


def load_config_from_args(
    config_file: str | None,
    sonarr_url: str | None,
    sonarr_api_key: str | None,
    log_level: str,
) -> Config:
    """
    Load configuration from CLI arguments and files

    Args:
        config_file: Path to config file
        sonarr_url: Sonarr URL from CLI
        sonarr_api_key: Sonarr API key from CLI
        log_level: Log level

    Returns:
        Config object

    Raises:
        SystemExit if configuration is invalid
    """
    try:
        if config_file:
            cfg = Config.from_env_and_file(Path(config_file))
        elif sonarr_url and sonarr_api_key:
            cfg = Config(
                sonarr_url=sonarr_url,
                sonarr_api_key=sonarr_api_key,
                log_level=log_level,
            )
        else:
            # Try to load from default file
            default_config = Path("config.yaml")
            if default_config.exists():
                cfg = Config.from_env_and_file(default_config)
            else:
                console.print(
                    "[red]Error:[/red] Missing configuration. Use --config or environment variables."
                )
                console.print("\nExample:")
                console.print(
                    "  feedarr --sonarr-url http://localhost:8989 --sonarr-api-key YOUR_KEY backlog"
                )
                console.print("\nOr create a config.yaml file (see config.example.yaml)")
                sys.exit(1)
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    return cfg


def validate_sonarr_connection(config: Config) -> SonarrClient:
    """
    Validate Sonarr connection and return client

    Raises:
        SystemExit if connection fails
    """
    try:
        sonarr_client = SonarrClient(
            config.sonarr_url, config.sonarr_api_key, timeout=config.request_timeout
        )
        # Quick check to validate API key and URL
        sonarr_client.get_system_status()
        return sonarr_client
    except Exception as e:
        console.print(f"[red]Sonarr connection failed:[/red] {e}")
        console.print("\nPlease verify:")
        console.print("  - Sonarr URL is correct (with port)")
        console.print("  - API key is valid (Settings > General in Sonarr)")
        console.print("  - Sonarr is accessible from your machine")
        sys.exit(1)


def setup_context(config: Config, sonarr_client: SonarrClient) -> dict:
    """
    Wire the sweeps and their collaborators

    Args:
        config: Configuration object
        sonarr_client: SonarrClient instance

    Returns:
        Dictionary with context objects
    """
    policy = QualityPolicy()
    library = SonarrLibrary(sonarr_client, policy)
    ledger = HistoryLedger(HistoryStore(config.history_file))

    sabnzbd = None
    if config.sabnzbd_configured:
        sabnzbd = SabnzbdClient(
            config.sabnzbd_url,
            config.sabnzbd_api_key,
            username=config.sabnzbd_username,
            password=config.sabnzbd_password,
            category=config.sabnzbd_category,
            priority=config.sabnzbd_priority,
            timeout=config.request_timeout,
        )

    pipeline = None
    if sabnzbd is not None:
        pipeline = FeedIngestionPipeline(
            RssFetcher(timeout=config.request_timeout),
            library,
            sabnzbd,
            ledger,
            policy=policy,
            max_workers=config.max_workers,
        )

    return {
        "config": config,
        "sonarr": sonarr_client,
        "sabnzbd": sabnzbd,
        "library": library,
        "ledger": ledger,
        "indexers": build_indexers(config.indexers),
        "pipeline": pipeline,
        "backlog": BacklogSweep(library, SonarrSearchDispatcher(sonarr_client)),
    }
