"""
promo-site: a content-driven musician promotion site.

The site is a single page of static prose sections (home, about, news),
a catalogue of albums and per-track audio players. Nothing is baked into
the markup: every section is rendered from content files fetched at
startup from a local directory or a web server.

Content Layout:
    content/
    ├── home.md, bio.md, news.md         # static sections
    └── albums/
        ├── index.json                   # {"albumDirectories": ["night-drive"]}
        └── night-drive/
            ├── info.md                  # front matter + album prose
            ├── cover.jpg
            ├── tracks/01-intro.mp3
            └── lyrics/01-intro.md

Pipeline:
    1. ContentStore fetches the album index and every album document
       in parallel, then the static documents, into a read-only catalog
    2. PromoSite builds the page from the skeleton, binds navigation and
       renders the featured album and the first section
    3. Navigation renders further sections from the catalog; only lyrics
       are fetched after startup

Configuration:
    Optional config.yaml in the working directory:

        site:
          content_root: "./content"      # or https://example.com/content
          initial_section: "home"
        fetch:
          threads: 4

Dependencies:
    - requests: Remote content fetching
    - markdown-it-py: Markdown to HTML
    - beautifulsoup4: Headless page document
    - mutagen: Audio durations for the players
    - click / rich-click: CLI
    - rich, tqdm: Progress bar and console logging
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "promo-site"
__license__ = "MIT"

# Convenience imports for common usage
from promo_site.content import ContentFetcher, ContentStore, DocumentParser
from promo_site.core import (
    Config,
    ConfigError,
    ContentIndexError,
    FetchError,
    PromoSiteError,
    get_logger,
    load_config,
    setup_logging,
)
from promo_site.site import PromoSite

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "PromoSiteError",
    "ConfigError",
    "FetchError",
    "ContentIndexError",
    # Pipeline
    "ContentFetcher",
    "DocumentParser",
    "ContentStore",
    "PromoSite",
]
