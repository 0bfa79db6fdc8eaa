"""Metadata extraction from raw page markup.

Every field is chosen by an ordered list of rules. A rule takes the parsed
document and returns a candidate string or None; the first non-empty
candidate wins. Rules never raise to the caller: a rule that fails on odd
markup counts as no match.
"""
import logging
from typing import Callable, Iterable, Optional, Sequence

from bs4 import BeautifulSoup

from tote.models import LinkMetadata
from tote.urls import favicon_url, host_of, resolve_url

log = logging.getLogger(__name__)

Rule = Callable[[BeautifulSoup], Optional[str]]

UNKNOWN_TITLE = "Unknown"


def _first_content(tags: Iterable, attr: str) -> Optional[str]:
    for tag in tags:
        value = tag.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        if value and value.strip():
            return value.strip()
    return None


def meta_property(prop: str) -> Rule:
    """Rule matching ``<meta property="...">`` (Open Graph style)."""
    def rule(soup: BeautifulSoup) -> Optional[str]:
        return _first_content(soup.find_all("meta", attrs={"property": prop}), "content")
    rule.__name__ = f"meta_property[{prop}]"
    return rule


def meta_name(name: str) -> Rule:
    """Rule matching ``<meta name="...">``."""
    def rule(soup: BeautifulSoup) -> Optional[str]:
        return _first_content(soup.find_all("meta", attrs={"name": name}), "content")
    rule.__name__ = f"meta_name[{name}]"
    return rule


def meta_card(key: str) -> Rule:
    """Rule for Twitter card tags, which sites publish as property or name."""
    by_property = meta_property(key)
    by_name = meta_name(key)

    def rule(soup: BeautifulSoup) -> Optional[str]:
        return by_property(soup) or by_name(soup)
    rule.__name__ = f"meta_card[{key}]"
    return rule


def title_element(soup: BeautifulSoup) -> Optional[str]:
    """Text of the first ``<title>`` element."""
    tag = soup.find("title")
    if tag is None:
        return None
    text = tag.get_text()
    return text.strip() or None


def link_rel(rel: str) -> Rule:
    """Rule matching ``<link rel="..." href="...">`` on the whole rel value."""
    wanted = rel.lower()

    def rule(soup: BeautifulSoup) -> Optional[str]:
        for tag in soup.find_all("link"):
            value = tag.get("rel")
            if isinstance(value, list):
                value = " ".join(value)
            if value and value.strip().lower() == wanted:
                return _first_content([tag], "href")
        return None
    rule.__name__ = f"link_rel[{rel}]"
    return rule


TITLE_RULES: Sequence[Rule] = (
    meta_property("og:title"),
    meta_card("twitter:title"),
    title_element,
)

DESCRIPTION_RULES: Sequence[Rule] = (
    meta_property("og:description"),
    meta_card("twitter:description"),
    meta_name("description"),
)

IMAGE_RULES: Sequence[Rule] = (
    meta_property("og:image"),
    meta_card("twitter:image"),
)

ICON_RULES: Sequence[Rule] = (
    link_rel("apple-touch-icon"),
    link_rel("icon"),
    link_rel("shortcut icon"),
)


def first_match(soup: BeautifulSoup, rules: Sequence[Rule]) -> Optional[str]:
    """Run rules in order and return the first non-empty candidate.

    Args:
        soup: Parsed document
        rules: Ordered rules for one field

    Returns:
        Stripped candidate or None if no rule matched
    """
    for rule in rules:
        try:
            value = rule(soup)
        except Exception as e:
            log.debug("Rule %s failed: %s", getattr(rule, "__name__", rule), e)
            continue
        if value and value.strip():
            return value.strip()
    return None


def parse_html(html: str) -> BeautifulSoup:
    """Parse markup leniently; unparseable input yields an empty document."""
    try:
        return BeautifulSoup(html or "", "html.parser")
    except Exception as e:
        log.debug("Could not parse markup: %s", e)
        return BeautifulSoup("", "html.parser")


def extract_title(soup: BeautifulSoup, source_url: str) -> str:
    title = first_match(soup, TITLE_RULES)
    if title:
        return title
    return host_of(source_url) or UNKNOWN_TITLE


def extract_description(soup: BeautifulSoup) -> Optional[str]:
    return first_match(soup, DESCRIPTION_RULES)


def extract_image(soup: BeautifulSoup, source_url: str) -> Optional[str]:
    candidate = first_match(soup, IMAGE_RULES)
    if candidate is None:
        return None
    return resolve_url(candidate, source_url)


def extract_icon(soup: BeautifulSoup, source_url: str) -> Optional[str]:
    candidate = first_match(soup, ICON_RULES)
    if candidate is not None:
        resolved = resolve_url(candidate, source_url)
        if resolved:
            return resolved
    return favicon_url(source_url)


def extract(html: str, source_url: str) -> LinkMetadata:
    """Extract presentation metadata from a page.

    Pure and total: never performs I/O and never raises on bad markup or a
    bad URL.

    Args:
        html: Raw page markup
        source_url: URL the page was requested from, used for resolving
            relative references and as the title of last resort

    Returns:
        LinkMetadata with a non-empty title
    """
    soup = parse_html(html)

    return LinkMetadata(
        title=extract_title(soup, source_url),
        description=extract_description(soup),
        icon=extract_icon(soup, source_url),
        image=extract_image(soup, source_url),
    )
