"""
Markup preparation for the roster parser.

- make_soup(): builds the tree with the html5lib -> lxml -> html.parser
  fallback chain, raising MarkupParseError only if all three fail.
- reduce(): optional shrink of a parsed page. It drops <script> and <style>
  elements and comments, none of which contribute text to roster-name nodes
  or their sections, so classification results are identical with and
  without it. It works on the tree, so "<!--" or "<script" inside attribute
  values or RCDATA such as <title> is left alone.
"""

from bs4 import BeautifulSoup
from bs4.element import Comment

from .exceptions import MarkupParseError
from .logger import get_module_logger

logger = get_module_logger("preprocessor")

# html5lib implements the WHATWG algorithm; lxml and html.parser are the
# fallbacks for the rare case it raises.
TREE_BUILDERS = ["html5lib", "lxml", "html.parser"]

DISCARDABLE_TAGS = ["script", "style"]


class Preprocessor:
    """Tree building and optional page reduction."""

    def reduce(self, soup: BeautifulSoup) -> dict:
        """
        Remove script/style elements and comments from a parsed page, in place.

        Args:
            soup: Parsed roster page

        Returns:
            Counts of removed elements: {"comment_count", "script_count", "style_count"}
        """
        info = {
            "comment_count": self._remove_comments(soup),
            "script_count": 0,
            "style_count": 0,
        }

        for element in soup.find_all(DISCARDABLE_TAGS):
            info[f"{element.name}_count"] += 1
            element.decompose()

        logger.debug(
            f"Reduced page: removed {info['comment_count']} comments, "
            f"{info['script_count']} scripts, {info['style_count']} styles"
        )
        return info

    def _remove_comments(self, soup: BeautifulSoup) -> int:
        """Remove HTML comments. Returns count of removed comments."""
        comments = soup.find_all(string=lambda text: isinstance(text, Comment))
        for comment in comments:
            comment.extract()
        return len(comments)

    def make_soup(self, html: str) -> BeautifulSoup:
        """
        Parse html into a BeautifulSoup tree.

        Raises:
            MarkupParseError: if every tree builder failed
        """
        errors = []
        for builder in TREE_BUILDERS:
            try:
                return BeautifulSoup(html, builder)
            except Exception as e:
                logger.warning(f"{builder} parsing failed: {e}")
                errors.append(f"{builder}: {e}")

        raise MarkupParseError("Could not parse roster page", details={"errors": errors})
