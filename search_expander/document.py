from __future__ import annotations

from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

ScrollListener = Callable[[], None]

# Headless hosts have no layout engine; sizes default to a typical desktop viewport.
DEFAULT_VIEWPORT_HEIGHT = 900
DEFAULT_DOCUMENT_HEIGHT = 900


class DocumentView:
    """
    The page the user is looking at: its URL, its parsed tree and the
    viewport metrics the scroll trigger reads.
    The host owns the metrics and reports scrolling through ``scroll_to``.
    """

    def __init__(
        self,
        url: str,
        html: str,
        *,
        viewport_height: int = DEFAULT_VIEWPORT_HEIGHT,
        document_height: int = DEFAULT_DOCUMENT_HEIGHT,
    ) -> None:
        self.url = url
        self.soup = BeautifulSoup(html, "html.parser")
        self.scroll_top = 0
        self.viewport_height = viewport_height
        self.document_height = document_height
        self._scroll_listeners: List[ScrollListener] = []

    @property
    def body(self) -> Tag:
        """The <body> element, created if the markup had none."""
        body = self.soup.body
        if body is None:
            body = self.soup.new_tag("body")
            root = self.soup.html or self.soup
            root.append(body)
        return body

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        return self.soup.find(id=element_id)

    # ---- scrolling ----

    def add_scroll_listener(self, listener: ScrollListener) -> None:
        if listener not in self._scroll_listeners:
            self._scroll_listeners.append(listener)

    def remove_scroll_listener(self, listener: ScrollListener) -> None:
        if listener in self._scroll_listeners:
            self._scroll_listeners.remove(listener)

    def scroll_to(self, top: int) -> None:
        max_top = max(self.document_height - self.viewport_height, 0)
        self.scroll_top = min(max(top, 0), max_top)
        for listener in list(self._scroll_listeners):
            listener()

    def scroll_to_bottom(self) -> None:
        self.scroll_to(self.document_height)

    @property
    def remaining_scroll(self) -> int:
        """Distance in pixels between the viewport bottom and the document end."""
        return self.document_height - (self.scroll_top + self.viewport_height)

    def html(self) -> str:
        return str(self.soup)


# ---- DOM helpers shared by adapters and overlays ----------------------------


def parse_fragment(markup: str) -> Tag:
    """Parse markup holding a single root element and return that element."""
    soup = BeautifulSoup(markup.strip(), "html.parser")
    node = soup.find(True)
    if node is None:
        raise ValueError("markup contains no element")
    return node.extract()


def text_length(node: Tag) -> int:
    return len(node.get_text().strip())


def _split_declarations(style: str) -> List[str]:
    # ';' inside url(...) or a quoted string belongs to the value.
    parts: List[str] = []
    buf: List[str] = []
    depth = 0
    quote: Optional[str] = None
    for ch in style:
        if quote:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        elif ch == ";" and not depth:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return parts


def parse_style(style: str) -> List[tuple[str, str]]:
    declarations: List[tuple[str, str]] = []
    for part in _split_declarations(style):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        name = name.strip().lower()
        if name:
            declarations.append((name, value.strip()))
    return declarations


def set_style_property(node: Tag, name: str, value: Optional[str]) -> None:
    """
    Set (or with ``None``, remove) one inline style declaration,
    leaving the others in place. Drops an emptied style attribute.
    """
    declarations = [(n, v) for n, v in parse_style(node.get("style", "")) if n != name]
    if value is not None:
        declarations.append((name, value))
    if declarations:
        node["style"] = "; ".join(f"{n}: {v}" for n, v in declarations)
    elif node.has_attr("style"):
        del node["style"]


def get_style_property(node: Tag, name: str) -> Optional[str]:
    for n, v in parse_style(node.get("style", "")):
        if n == name:
            return v
    return None


def set_displayed(nodes: List[Tag], displayed: bool) -> None:
    for node in nodes:
        set_style_property(node, "display", None if displayed else "none")
