"""
Command-line interface for promo-site.

This module implements the CLI using Click; rich-click is used for the
help output colors.

Commands:
    promo-site                              Render the site (home section)
    promo-site --section music              Render, then navigate to a section
    promo-site --output site.html           Write the rendered page to a file
    promo-site --content ./content          Use a content root without config.yaml
    promo-site --check                      Only discover content and report

Usage:
    # Render from a local content directory
    promo-site --content ./content --output build/index.html

    # Render from a web server
    promo-site --content https://example.com/content --section music

    # Check that every album in the index loads
    promo-site --check

Configuration:
    The CLI reads config.yaml from the current directory (or --config).
    When --content is given, config.yaml is optional.

Exit Codes:
    0  success
    1  configuration error, unreadable album index, or (--check) no
       album could be loaded
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Content",
            "options": ["--config", "--content"],
        },
        {
            "name": "Rendering",
            "options": ["--section", "--output", "--check"],
        },
        {
            "name": "Info",
            "options": ["--verbose", "--version", "--help"],
        },
    ],
}

from promo_site import __version__
from promo_site.content import ContentCatalog, ContentFetcher, ContentStore, DocumentParser
from promo_site.core import (
    Config,
    ConfigError,
    ContentIndexError,
    PromoSiteError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from promo_site.core.progress import DiscoveryProgressBar
from promo_site.site import PromoSite
from promo_site.utils import ensure_directory

logger = get_logger(__name__)


@click.command()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--content",
    type=str,
    default=None,
    metavar="<dir-or-url>",
    help="Content root directory or base URL"
)
@click.option(
    "--section",
    type=str,
    default=None,
    metavar="<name>",
    help="Navigate to this section after the initial render"
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<file.html>",
    help="Write the rendered page here instead of stdout"
)
@click.option(
    "--check",
    is_flag=True,
    help="Discover content and print a summary, without rendering"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug output on the console"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    content: Optional[str],
    section: Optional[str],
    output: Optional[Path],
    check: bool,
    verbose: bool,
    version: bool
) -> None:
    """
    promo-site: render a musician promo site from content files.

    Loads the album index, every album and the static sections from the
    content root, then renders the page: featured album, the initial
    section, and optionally another section.

    \b
    BASIC USAGE:
        promo-site --content ./content                     # Print the page
        promo-site --content ./content --output site.html  # Write the page
        promo-site --section music                         # Show the catalogue

    \b
    CHECKING CONTENT:
        promo-site --check                                 # Report what loads
    """
    # Handle --version
    if version:
        click.echo(f"promo-site {__version__}")
        ctx.exit(0)

    _run(
        config_path=config_path,
        content_root=content,
        section=section,
        output=output,
        check=check,
        verbose=verbose
    )


def _run(
    config_path: Path | None,
    content_root: str | None,
    section: str | None,
    output: Path | None,
    check: bool,
    verbose: bool
) -> None:
    """
    Execute the render workflow.

    1. Load configuration
    2. Set up logging
    3. Initialize the content store
    4. Either print a summary (--check) or render the page

    Raises:
        SystemExit: On fatal errors (exit code 1).
    """
    fetcher: ContentFetcher | None = None

    try:
        config = load_config(config_path, content_root=content_root)

        log_file = setup_logging(config.logging.directory, verbose=verbose)
        logger.info(f"promo-site {__version__} starting")
        if log_file is not None:
            logger.debug(f"Logging to {log_file}")

        fetcher = ContentFetcher(
            config.site.content_root,
            timeout=config.fetch.timeout,
            user_agent=config.fetch.user_agent
        )
        parser = DocumentParser(fetcher)
        # The page itself goes to stdout unless --output is given
        catalog = _initialize_content(config, fetcher, parser, show_progress=check or output is not None)

        if check:
            _print_summary(catalog, config)
            if not catalog.albums:
                click.echo("No album could be loaded", err=True)
                sys.exit(1)
            return

        html = _render(config, catalog, parser, section)

        if output is not None:
            ensure_directory(output.parent)
            output.write_text(html, encoding="utf-8")
            logger.info(f"Page written to {output}")
        else:
            click.echo(html)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except ContentIndexError as e:
        click.echo(f"Content error: {e.message}", err=True)
        logger.error(f"Content error: {e}")
        sys.exit(1)

    except PromoSiteError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except OSError as e:
        click.echo(f"I/O error: {e}", err=True)
        logger.error(f"I/O error: {e}", exc_info=True)
        sys.exit(1)

    finally:
        if fetcher is not None:
            fetcher.close()
        shutdown_logging()


def _initialize_content(
    config: Config,
    fetcher: ContentFetcher,
    parser: DocumentParser,
    show_progress: bool = True
) -> ContentCatalog:
    """
    Discover albums and static documents.

    Raises:
        ContentIndexError: If the album index can't be loaded.
    """
    store = ContentStore(
        fetcher,
        parser,
        content_config=config.content,
        threads=config.fetch.threads,
        progress_factory=DiscoveryProgressBar if show_progress else None
    )
    return store.initialize()


def _render(config: Config, catalog: ContentCatalog, parser: DocumentParser, section: str | None) -> str:
    """Build the page, run the initial navigation and return its HTML."""
    site = PromoSite.build(
        catalog,
        parser,
        skeleton=config.site.skeleton,
        static_documents=config.content.static_documents
    )
    try:
        site.start(config.site.initial_section)
        if section and not site.navigation.navigate(section):
            click.echo(f"Section '{section}' could not be rendered", err=True)
        # Apply anything still in flight before taking the snapshot
        site.page.process_events(wait=True, timeout=config.fetch.timeout)
        return site.page.html()
    finally:
        site.close()


def _print_summary(catalog: ContentCatalog, config: Config) -> None:
    """
    Print what the content store loaded.

    Output:
        One line per album (id, title, track count, featured flag) and
        one per configured static document.
    """
    click.echo("=" * 60)
    click.echo(f"CONTENT: {config.site.content_root}")
    click.echo("=" * 60)
    click.echo(f"Albums:            {len(catalog.albums)}")
    for album in catalog.albums.values():
        featured = "  [featured]" if album.featured else ""
        click.echo(f"  {album.album_id:<20} {album.title or '-':<25} {len(album.tracks)} tracks{featured}")

    names = list(dict.fromkeys(config.content.static_documents.values()))
    click.echo(f"Static documents:  {len(catalog.documents)} of {len(names)}")
    for name in names:
        status = "ok" if catalog.document(name) is not None else "missing"
        click.echo(f"  {name:<20} {status}")
    click.echo("=" * 60)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `promo-site` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
