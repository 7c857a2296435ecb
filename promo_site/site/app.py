"""
Page bootstrap for promo-site.

Wires a loaded ContentCatalog into a Page: builds the renderer and the
navigation controller, binds the navigation anchors, renders the
featured album and the initial section.

Usage:
    site = PromoSite.build(catalog, parser, skeleton=None)
    site.start("home")
    site.navigation.navigate("music")
    html = site.page.html()
"""

from pathlib import Path
from typing import Mapping

from promo_site.content.parser import DocumentParser
from promo_site.content.store import ContentCatalog
from promo_site.core.logger import get_logger
from promo_site.site.dom import Page
from promo_site.site.navigation import NavigationController
from promo_site.site.renderer import MediaFactory, SectionRenderer

logger = get_logger(__name__)


class PromoSite:
    """
    A rendered promo site: page, renderer and navigation.

    Attributes:
        page: The headless page.
        renderer: Section renderer over the catalog.
        navigation: Navigation controller bound to the page's menu.
    """

    def __init__(self, page: Page, renderer: SectionRenderer, navigation: NavigationController) -> None:
        self.page = page
        self.renderer = renderer
        self.navigation = navigation
        self._started = False

    @classmethod
    def build(
        cls,
        catalog: ContentCatalog,
        parser: DocumentParser,
        skeleton: Path | None = None,
        static_documents: Mapping[str, str] | None = None,
        media_factory: MediaFactory | None = None
    ) -> "PromoSite":
        page = Page.from_skeleton(skeleton)
        renderer = SectionRenderer(
            page,
            catalog,
            parser,
            static_documents=static_documents,
            media_factory=media_factory
        )
        return cls(page, renderer, NavigationController(page, renderer))

    def start(self, initial_section: str = "home") -> None:
        """Bind navigation, render the featured album and the initial section."""
        if self._started:
            logger.warning("Site already started")
            return
        self._started = True

        self.navigation.bind()
        self.renderer.render_featured()
        self.navigation.navigate(initial_section)

    def close(self) -> None:
        self.page.close()
