"""
Navigation for promo-site.

Binds the `.nav-menu a` anchors of the page to section names and routes
activations to the SectionRenderer. The section of an anchor is its href
fragment without the leading "#":

    <nav class="nav-menu"><a href="#music">Music</a></nav>   ->  "music"

Every accepted navigation is a new transition with its own
CancellationToken; starting one cancels the previous token so work the
old section started (lyrics fetches) can't land afterwards.
"""

from promo_site.core.logger import get_logger
from promo_site.site.dom import CancellationToken, Event, Page
from promo_site.site.renderer import SectionRenderer

logger = get_logger(__name__)


NAV_LINK_SELECTOR = ".nav-menu a"


def section_from_href(href: str | None) -> str:
    """Return the section named by an anchor href ("#news" -> "news")."""
    if not href:
        return ""
    return href.strip()[1:] if href.strip().startswith("#") else ""


class NavigationController:
    """
    Routes navigation requests to the renderer.

    Attributes:
        page: Page holding the navigation anchors.
        renderer: Renderer that draws the requested section.
        current_section: Last section navigated to, or None.
    """

    def __init__(self, page: Page, renderer: SectionRenderer) -> None:
        self.page = page
        self.renderer = renderer
        self.current_section: str | None = None
        self._token: CancellationToken | None = None

    @property
    def current_token(self) -> CancellationToken | None:
        return self._token

    def bind(self) -> int:
        """
        Attach click handlers to every navigation anchor.

        Returns:
            Number of anchors bound.
        """
        links = self.page.query_all(NAV_LINK_SELECTOR)
        for link in links:
            section = section_from_href(link.get("href"))
            self.page.add_listener(link, "click", self._click_handler(section))
            logger.debug(f"Navigation bound: {section or '<empty>'}")

        logger.debug(f"Bound {len(links)} navigation link(s)")
        return len(links)

    def _click_handler(self, section: str):
        def on_click(event: Event) -> None:
            event.prevent_default()
            self.navigate(section)
        return on_click

    def navigate(self, section: str) -> bool:
        """
        Render a section.

        Empty section names are ignored. Unknown sections are logged and
        leave the page untouched.

        Returns:
            True if the section was rendered.
        """
        section = (section or "").strip()
        if not section:
            return False

        if not self.renderer.has_section(section):
            logger.warning(f"Unknown section: {section}")
            return False

        if self._token is not None:
            self._token.cancel()
        self._token = CancellationToken(section)
        self.current_section = section

        logger.info(f"Navigating to: {section}")
        return self.renderer.render(section, self._token)
