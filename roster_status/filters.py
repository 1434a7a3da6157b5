"""
Markup filters: named structural predicates that narrow which roster entries
count for a display variant.

Each filter is a (type, selector) pair plus a condition keyed by its type.
matches() finds the nearest ancestor-or-self of a roster node that matches
the selector and evaluates the condition on it; a node without such an
ancestor passes.

    STARTELF  - node sits in a .sub_child block that is visible
                (inline style display: block), i.e. no alternatives listed
    GESETZT   - node's .sub_child block carries no ".player_no .next_sub"
                arrow, i.e. the player is not flagged for rotation
"""

from enum import Enum
from typing import Callable, Optional

from bs4.element import PreformattedString, Tag
from pydantic import BaseModel, ConfigDict

from .exceptions import UnknownFilterError
from .schemas import NO_FILTER


class FilterType(str, Enum):
    """Supported filter variants."""
    STARTELF = "STARTELF"
    GESETZT = "GESETZT"


def closest(element: Tag, selector: str) -> Optional[Tag]:
    """Nearest ancestor-or-self matching a CSS selector, or None."""
    return element.css.closest(selector)


# Elements whose strings never render as text
NON_TEXT_TAGS = {"script", "style"}


def text_content(element: Tag) -> str:
    """
    Rendered text of an element: every descendant string except comments,
    doctypes and the bodies of script/style elements.
    """
    return "".join(
        s for s in element.find_all(string=True)
        if not isinstance(s, PreformattedString) and s.parent.name not in NON_TEXT_TAGS
    )


def inline_style(element: Tag, prop: str) -> Optional[str]:
    """
    Value of one property from the element's inline style attribute.

    Later declarations override earlier ones, as in a browser. Returns the
    lower-cased value, or None if the property is not declared.
    """
    style = element.get("style", "")
    if not style:
        return None

    value = None
    for declaration in style.split(";"):
        name, sep, raw_value = declaration.partition(":")
        if sep and name.strip().lower() == prop:
            value = raw_value.strip().lower()
    return value


def _is_displayed_as_block(element: Tag) -> bool:
    return inline_style(element, "display") == "block"


def _has_no_rotation_arrow(element: Tag) -> bool:
    sub_child = closest(element, ".sub_child")
    if sub_child is None:
        return True
    return not sub_child.select(".player_no .next_sub")


_CONDITIONS: dict[FilterType, Callable[[Tag], bool]] = {
    FilterType.STARTELF: _is_displayed_as_block,
    FilterType.GESETZT: _has_no_rotation_arrow,
}


class MarkupFilter(BaseModel):
    """A filter variant: its type tag and the selector its condition runs on."""
    model_config = ConfigDict(frozen=True)

    type: FilterType
    selector: str

    def condition(self, element: Tag) -> bool:
        return _CONDITIONS[self.type](element)


STARTELF_FILTER = MarkupFilter(type=FilterType.STARTELF, selector=".sub_child")
GESETZT_FILTER = MarkupFilter(type=FilterType.GESETZT, selector="div.player_name")

FILTER_MAP: dict[str, MarkupFilter] = {
    FilterType.GESETZT.value: GESETZT_FILTER,
    FilterType.STARTELF.value: STARTELF_FILTER,
}


def filter_key(markup_filter: Optional[MarkupFilter]) -> str:
    """Filter component of a VerdictKey: the type tag or "none"."""
    return markup_filter.type.value if markup_filter is not None else NO_FILTER


def resolve_filter(filter_name: Optional[str]) -> Optional[MarkupFilter]:
    """
    Map a filter name from a request to its MarkupFilter.

    Args:
        filter_name: "STARTELF", "GESETZT" (case-insensitive), or None/"" for no filter

    Raises:
        UnknownFilterError: if the name is not a known filter
    """
    if not filter_name or filter_name.strip().lower() == NO_FILTER:
        return None
    markup_filter = FILTER_MAP.get(filter_name.strip().upper())
    if markup_filter is None:
        raise UnknownFilterError(filter_name, sorted(FILTER_MAP))
    return markup_filter


def matches(element: Tag, markup_filter: Optional[MarkupFilter]) -> bool:
    """
    Check whether a roster node is in scope for a filter.

    No filter always matches. When the node has no ancestor-or-self matching
    the filter's selector, the structural context is missing and the node
    passes.
    """
    if markup_filter is None:
        return True

    anchor = closest(element, markup_filter.selector)
    if anchor is None:
        return True

    return markup_filter.condition(anchor)
