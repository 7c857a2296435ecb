"""
Page layer for promo-site.

    dom.py        - Page (headless document + events), CancellationToken
    player.py     - PlaybackWidget and media elements
    renderer.py   - SectionRenderer: sections, overlays, featured album
    navigation.py - NavigationController: menu anchors -> sections
    app.py        - PromoSite: wires everything onto a page

Usage:
    from promo_site.site import PromoSite

    site = PromoSite.build(catalog, parser)
    site.start("home")
"""

from promo_site.site.app import PromoSite
from promo_site.site.dom import CancellationToken, Event, Page
from promo_site.site.navigation import NavigationController, section_from_href
from promo_site.site.player import (
    HeadlessMediaElement,
    MediaElement,
    MediaErrorKind,
    PlaybackState,
    PlaybackWidget,
    format_time,
)
from promo_site.site.renderer import SectionRenderer

__all__ = [
    "PromoSite",
    "Page",
    "Event",
    "CancellationToken",
    "NavigationController",
    "section_from_href",
    "SectionRenderer",
    "PlaybackWidget",
    "PlaybackState",
    "MediaElement",
    "HeadlessMediaElement",
    "MediaErrorKind",
    "format_time",
]
