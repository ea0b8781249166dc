# fabexport/dom.py
"""
Small traversal helpers over BeautifulSoup trees.

The extractors only ever need text, children, following siblings and CSS
selection, so they are written against these helpers and tested with
synthetic HTML snippets instead of a live browser.
"""

from typing import Iterator, List, Optional, Union

from bs4 import BeautifulSoup, Tag

Node = Union[BeautifulSoup, Tag]


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def text_of(node: Optional[Node]) -> str:
    """Whitespace-trimmed text content, "" for a missing node."""
    if node is None:
        return ""
    return node.get_text().strip()


def child_elements(node: Node) -> List[Tag]:
    return node.find_all(True, recursive=False)


def following_siblings(node: Tag) -> Iterator[Tag]:
    sibling = node.find_next_sibling()
    while sibling is not None:
        yield sibling
        sibling = sibling.find_next_sibling()


def has_class(node: Optional[Tag], class_name: str) -> bool:
    return node is not None and class_name in (node.get("class") or [])


def body_of(document: BeautifulSoup) -> Node:
    """The <body> element when the parser produced one, else the document."""
    return document.body or document
