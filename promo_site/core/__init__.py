"""
Core module for promo-site.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and file outputs
    - progress: Rich progress bar for album discovery

Usage:
    from promo_site.core import (
        Config, load_config,
        setup_logging, get_logger,
        PromoSiteError, ConfigError, FetchError
    )
"""

from promo_site.core.config import (
    Config,
    ContentConfig,
    FetchConfig,
    LoggingConfig,
    SiteConfig,
    load_config,
)
from promo_site.core.exceptions import (
    ConfigError,
    ContentIndexError,
    FetchError,
    PlaybackError,
    PromoSiteError,
    RenderError,
    StoreStateError,
)
from promo_site.core.logger import (
    get_logger,
    log_album_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SiteConfig",
    "ContentConfig",
    "FetchConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "PromoSiteError",
    "ConfigError",
    "FetchError",
    "ContentIndexError",
    "StoreStateError",
    "RenderError",
    "PlaybackError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_album_failure",
    "shutdown_logging",
]
