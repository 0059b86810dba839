"""UI hierarchy parsing and tree-walk utilities.

A single walker, :func:`iter_texts`, serves both live element inspection
(uiautomator2 hands out lxml nodes for XPath matches) and static page-source
dumps parsed here with defusedxml. Both node flavours expose ``.iter()``,
``.tag`` and ``.attrib``, which is all the walker relies on.

Usage:
    root = parse_page_source(device.dump_hierarchy())
    node = find_node_by_content_desc(root, "Brigade, Whitefield")
    texts = list(iter_texts(node))
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

logger = logging.getLogger(__name__)

_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")

NodePredicate = Callable[[object], bool]


@dataclass
class ElementInfo:
    """Attributes of a single hierarchy node."""

    class_name: str  # e.g., "android.widget.TextView"
    bounds: Tuple[int, int, int, int]  # (left, top, right, bottom)
    text: Optional[str] = None
    content_desc: Optional[str] = None
    clickable: bool = False
    enabled: bool = True
    displayed: bool = True

    @property
    def location(self) -> Tuple[int, int]:
        """Top-left corner of the element."""
        return (self.bounds[0], self.bounds[1])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the element."""
        return (self.bounds[2] - self.bounds[0], self.bounds[3] - self.bounds[1])

    @property
    def center(self) -> Tuple[int, int]:
        x, y = self.location
        width, height = self.size
        return (x + width // 2, y + height // 2)

    @classmethod
    def from_node(cls, node) -> "ElementInfo":
        attrib = node.attrib
        bounds = parse_bounds(attrib.get("bounds", "[0,0][0,0]"))
        width = bounds[2] - bounds[0]
        height = bounds[3] - bounds[1]
        return cls(
            class_name=attrib.get("class") or str(node.tag),
            bounds=bounds,
            text=attrib.get("text") or None,
            content_desc=attrib.get("content-desc") or None,
            clickable=attrib.get("clickable") == "true",
            enabled=attrib.get("enabled", "true") == "true",
            displayed=(
                attrib.get("visible-to-user", attrib.get("displayed", "true")) == "true"
                and width > 0
                and height > 0
            ),
        )


def parse_bounds(bounds_str: str) -> Tuple[int, int, int, int]:
    """``"[100,200][300,400]"`` -> ``(100, 200, 300, 400)``; zeros when unreadable."""
    match = _BOUNDS_RE.search(bounds_str or "")
    if match is None:
        logger.debug(f"Unreadable bounds {bounds_str!r}")
        return (0, 0, 0, 0)
    left, top, right, bottom = (int(v) for v in match.groups())
    return (left, top, right, bottom)


def parse_page_source(xml_content: str):
    """Parse a dumped UI hierarchy into an element tree root.

    Raises:
        ValueError: The markup is malformed or was rejected by defusedxml
    """
    try:
        return DefusedET.fromstring(xml_content)
    except ET.ParseError as e:
        raise ValueError(f"Malformed page source: {e}") from e
    except DefusedXmlException as e:
        logger.warning(f"Page source refused by defusedxml: {e!r}")
        raise ValueError(f"Page source refused: {e!r}") from e


def is_text_view(node) -> bool:
    """True for TextView nodes, whether the tag or the class attribute names it."""
    class_name = node.attrib.get("class") or str(node.tag)
    return "TextView" in class_name


def iter_nodes(root, predicate: Optional[NodePredicate] = None) -> Iterator[object]:
    """Lazily yield ``root`` and its descendants matching ``predicate``."""
    if root is None:
        return
    for node in root.iter():
        if predicate is None or predicate(node):
            yield node


def iter_texts(root, predicate: Optional[NodePredicate] = None) -> Iterator[str]:
    """Lazily yield trimmed, non-empty ``text`` values of matching nodes."""
    for node in iter_nodes(root, predicate):
        text = (node.attrib.get("text") or "").strip()
        if text:
            yield text


def unique_in_order(values) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def find_node_by_content_desc(root, content_desc: str):
    """Return the first node whose content-desc equals ``content_desc``."""
    return next(
        iter_nodes(root, lambda n: n.attrib.get("content-desc") == content_desc),
        None,
    )


def extract_prices(
    page_source: str,
    record_names: Sequence[str],
    currency_symbol: str = "₹",
) -> Dict[str, List[str]]:
    """Collect price strings shown inside each named record of a page dump.

    Records that cannot be located in the dump are omitted from the result.
    """
    price_re = re.compile(rf"^{re.escape(currency_symbol)}\d+")
    root = parse_page_source(page_source)
    prices: Dict[str, List[str]] = {}
    for name in record_names:
        node = find_node_by_content_desc(root, name)
        if node is None:
            logger.error(f"[PRICES] Could not find node for record \"{name}\"")
            continue
        texts = list(iter_texts(node))
        prices[name] = [t for t in texts if price_re.match(t)]
        logger.info(f"[PRICES] Prices for \"{name}\": {prices[name]}")
    return prices
