"""
Configuration management for promo-site.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Where the site content lives (local directory or http(s) base URL)
    - Optional custom page skeleton and the section rendered first
    - Content layout (album index path, albums directory, static documents)
    - Fetch behaviour (timeout, worker threads, User-Agent)
    - Optional log file directory

Configuration File Location:
    The config.yaml file is looked up in the current working directory
    unless an explicit path is given.

Example config.yaml:
    site:
      content_root: "./content"
      initial_section: "home"

    content:
      static_documents:
        home: "home"
        about: "bio"
        news: "news"

    fetch:
      timeout: 15
      threads: 4

    logging:
      directory: "~/.cache/promo-site/logs"
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from promo_site.core.exceptions import ConfigError


# Default configuration file name (always in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_STATIC_DOCUMENTS = {
    "home": "home",
    "about": "bio",
    "news": "news",
}
DEFAULT_USER_AGENT = "promo-site/0.1"


@dataclass(frozen=True)
class SiteConfig:
    """
    Site-level configuration.

    Attributes:
        content_root: Base location of all content files. Either an
                      http(s):// URL or a local directory path (with ~
                      expanded and made absolute).
        skeleton: Optional path to a custom page skeleton HTML file.
                  None uses the skeleton shipped with the package.
        initial_section: Section rendered right after startup.
    """
    content_root: str
    skeleton: Path | None = None
    initial_section: str = "home"


@dataclass(frozen=True)
class ContentConfig:
    """
    Content layout configuration.

    Attributes:
        index_path: Path of the album index JSON, relative to content_root.
        albums_dir: Directory holding one sub-directory per album.
        static_documents: Section identifier -> static document name.
                          The document is fetched from "<name>.md".
    """
    index_path: str = "albums/index.json"
    albums_dir: str = "albums"
    static_documents: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_STATIC_DOCUMENTS)
    )


@dataclass(frozen=True)
class FetchConfig:
    """
    Fetch behaviour configuration.

    Attributes:
        timeout: Per-request timeout in seconds for HTTP content roots.
        threads: Number of parallel fetch threads used during discovery.
        user_agent: User-Agent header sent with HTTP requests.
    """
    timeout: float = 15.0
    threads: int = 4
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        directory: Directory for log files. None logs to the console only.
    """
    directory: Path | None = None


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    This is the main configuration object that aggregates all configuration
    sections. It is created by load_config() and should be treated as
    immutable (frozen dataclass).

    Example:
        config = load_config()
        print(f"Reading content from: {config.site.content_root}")
        print(f"Using {config.fetch.threads} threads")
    """
    site: SiteConfig
    content: ContentConfig = field(default_factory=ContentConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(
    config_path: Path | None = None,
    content_root: str | None = None
) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.
        content_root: Optional override for 'site.content_root'. When given,
                      a missing default config file is not an error and the
                      built-in defaults are used for everything else.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains invalid values.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Read and parse YAML content
        3. Apply the content_root override if given
        4. Validate and parse each section, applying defaults
        5. Create and return frozen Config object
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    raw_config: dict[str, Any]
    if not config_path.exists():
        if explicit or content_root is None:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        raw_config = {}
    else:
        raw_config = _read_yaml(config_path)

    if content_root is not None:
        site_section = dict(raw_config.get("site") or {})
        site_section["content_root"] = content_root
        raw_config["site"] = site_section

    _validate_config(raw_config)

    return Config(
        site=_parse_site_config(raw_config["site"]),
        content=_parse_content_config(raw_config.get("content")),
        fetch=_parse_fetch_config(raw_config.get("fetch")),
        logging=_parse_logging_config(raw_config.get("logging")),
    )


def _read_yaml(config_path: Path) -> dict[str, Any]:
    """Read config_path and return its top-level YAML dictionary."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file is an empty configuration
    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )
    return raw_config


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate the raw configuration dictionary structure.

    Raises:
        ConfigError: If the required 'site' section is missing or any
                     present section is not a dictionary.
    """
    if "site" not in raw_config:
        raise ConfigError(
            "Missing required section: 'site'",
            details={"missing_section": "site"}
        )

    for section in ("site", "content", "fetch", "logging"):
        value = raw_config.get(section)
        if section != "site" and value is None:
            continue
        if not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_site_config(site_section: dict[str, Any]) -> SiteConfig:
    """
    Parse and validate the site configuration section.

    Local content roots are expanded (~) and made absolute; URLs are kept
    as given minus any trailing slash.
    """
    content_root = site_section.get("content_root", "")

    if not isinstance(content_root, str) or not content_root.strip():
        raise ConfigError(
            "'site.content_root' must be a non-empty string",
            details={"field": "site.content_root"}
        )
    content_root = content_root.strip()

    if content_root.startswith(("http://", "https://")):
        content_root = content_root.rstrip("/")
    else:
        content_root = str(Path(content_root).expanduser().resolve())

    skeleton = None
    raw_skeleton = site_section.get("skeleton")
    if raw_skeleton is not None:
        if not isinstance(raw_skeleton, str) or not raw_skeleton.strip():
            raise ConfigError(
                "'site.skeleton' must be a non-empty string path or null",
                details={"field": "site.skeleton"}
            )
        skeleton = Path(raw_skeleton.strip()).expanduser().resolve()
        if not skeleton.exists():
            raise ConfigError(
                f"Skeleton file not found: {skeleton}",
                details={"field": "site.skeleton", "path": str(skeleton)}
            )

    initial_section = site_section.get("initial_section", "home")
    if not isinstance(initial_section, str) or not initial_section.strip():
        raise ConfigError(
            "'site.initial_section' must be a non-empty string",
            details={"field": "site.initial_section"}
        )

    return SiteConfig(
        content_root=content_root,
        skeleton=skeleton,
        initial_section=initial_section.strip()
    )


def _parse_content_config(content_section: dict[str, Any] | None) -> ContentConfig:
    """
    Parse and validate the content layout section.

    Applies defaults if section is missing or fields are not specified.
    """
    if content_section is None:
        return ContentConfig()

    values: dict[str, Any] = {}
    for key in ("index_path", "albums_dir"):
        raw = content_section.get(key)
        if raw is None:
            continue
        if not isinstance(raw, str) or not raw.strip():
            raise ConfigError(
                f"'content.{key}' must be a non-empty string",
                details={"field": f"content.{key}"}
            )
        values[key] = raw.strip().strip("/")

    raw_documents = content_section.get("static_documents")
    if raw_documents is not None:
        if not isinstance(raw_documents, dict) or not all(
            isinstance(k, str) and isinstance(v, str) and k.strip() and v.strip()
            for k, v in raw_documents.items()
        ):
            raise ConfigError(
                "'content.static_documents' must map section names to document names",
                details={"field": "content.static_documents"}
            )
        values["static_documents"] = {
            k.strip(): v.strip() for k, v in raw_documents.items()
        }

    return ContentConfig(**values)


def _parse_fetch_config(fetch_section: dict[str, Any] | None) -> FetchConfig:
    """
    Parse and validate the fetch configuration section.

    Raises:
        ConfigError: If threads is not a positive integer or timeout is
                     not a positive number.
    """
    # Defaults
    timeout = 15.0
    threads = 4
    user_agent = DEFAULT_USER_AGENT

    if fetch_section is not None:
        raw_timeout = fetch_section.get("timeout")
        if raw_timeout is not None:
            if isinstance(raw_timeout, bool) or not isinstance(raw_timeout, (int, float)) or raw_timeout <= 0:
                raise ConfigError(
                    "'fetch.timeout' must be a positive number",
                    details={"field": "fetch.timeout", "value": raw_timeout}
                )
            timeout = float(raw_timeout)

        raw_threads = fetch_section.get("threads")
        if raw_threads is not None:
            if isinstance(raw_threads, bool) or not isinstance(raw_threads, int) or raw_threads < 1:
                raise ConfigError(
                    "'fetch.threads' must be a positive integer",
                    details={"field": "fetch.threads", "value": raw_threads}
                )
            threads = raw_threads

        raw_agent = fetch_section.get("user_agent")
        if raw_agent is not None:
            if not isinstance(raw_agent, str) or not raw_agent.strip():
                raise ConfigError(
                    "'fetch.user_agent' must be a non-empty string",
                    details={"field": "fetch.user_agent"}
                )
            user_agent = raw_agent.strip()

    return FetchConfig(timeout=timeout, threads=threads, user_agent=user_agent)


def _parse_logging_config(logging_section: dict[str, Any] | None) -> LoggingConfig:
    """Parse the optional logging section (log directory only)."""
    if logging_section is None:
        return LoggingConfig()

    raw_directory = logging_section.get("directory")
    if raw_directory is None:
        return LoggingConfig()

    if not isinstance(raw_directory, str) or not raw_directory.strip():
        raise ConfigError(
            "'logging.directory' must be a non-empty string path or null",
            details={"field": "logging.directory"}
        )
    return LoggingConfig(directory=Path(raw_directory.strip()).expanduser().resolve())
