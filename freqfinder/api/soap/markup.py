"""
Field and repeated-group extraction for provider SOAP responses.

The provider encodes arrays as a flat run of ``<item>`` elements with no
enclosing array tag, and an item may itself hold further ``<item>`` runs
(a site inside a system carrying its own frequency list). Extraction walks
the parsed tree and stops descending at the first match, so nested groups
stay intact inside their parent instead of being split apart.

Tag names are matched case-insensitively because ``html.parser`` lower-cases
them while building the tree.
"""

from typing import Iterator, List, Optional, Union

from bs4 import BeautifulSoup, Tag

Markup = Union[str, Tag]

ITEM = "item"


def parse(markup: Markup) -> Tag:
    """Parse a document (or fragment) once so it can be queried repeatedly."""
    if isinstance(markup, Tag):
        return markup
    return BeautifulSoup(markup or "", "html.parser")


def _walk(node: Tag, name: str) -> Iterator[Tag]:
    for child in node.children:
        if not isinstance(child, Tag):
            continue
        if child.name == name:
            yield child
        else:
            yield from _walk(child, name)


def find(markup: Markup, tag: str) -> Optional[Tag]:
    """Return the first element named ``tag`` in document order."""
    return parse(markup).find(tag.lower())


def get_text(markup: Markup, tag: str) -> str:
    """
    Get the text content of the first ``tag`` element.

    Returns:
        The stripped text, or an empty string when the element is absent.
    """
    element = find(markup, tag)
    if element is None:
        return ""
    return element.get_text().strip()


def get_all_text(markup: Markup, tag: str) -> List[str]:
    """Get the stripped text of every ``tag`` element, nested or not."""
    return [el.get_text().strip() for el in parse(markup).find_all(tag.lower())]


def get_group_nodes(markup: Markup, container: str = ITEM) -> List[Tag]:
    """Return the top-level ``container`` elements as parsed nodes."""
    return list(_walk(parse(markup), container.lower()))


def get_groups(markup: Markup, container: str = ITEM) -> List[str]:
    """
    Get the inner markup of every top-level ``container`` element.

    Occurrences nested inside another ``container`` are left inside their
    parent's markup. Truncated documents simply yield fewer groups.
    """
    return [node.decode_contents() for node in get_group_nodes(markup, container)]


def get_section(markup: Markup, tag: str) -> Optional[Tag]:
    """Return the first ``tag`` element, e.g. ``cats`` or ``siteFreqs``."""
    return find(markup, tag)


def section_groups(markup: Markup, section: str, container: str = ITEM) -> List[Tag]:
    """Top-level groups inside the first ``section`` element, or ``[]``."""
    node = get_section(markup, section)
    if node is None:
        return []
    return get_group_nodes(node, container)
