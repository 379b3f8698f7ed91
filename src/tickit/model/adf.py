"""Rich-text document trees: parse, flatten to plain text, and build from markdown."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from markdown_it import MarkdownIt
from markdown_it.token import Token


@dataclass(frozen=True)
class Text:
    text: str
    marks: tuple[str, ...] = ()


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class Paragraph:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int = 1
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ListItem:
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Other:
    """Any node type without its own class, including the document root."""

    type: str
    children: tuple[Node, ...] = ()
    attrs: dict[str, Any] = field(default_factory=dict)


Node = Union[Text, HardBreak, Paragraph, Heading, ListItem, Other]


# --- Parsing ---


def parse_node(data: Any) -> Node:
    """Build a node tree from its JSON form. Never fails on unknown types."""
    if not isinstance(data, dict):
        return Other("unknown")
    kind = data.get("type", "")
    attrs = data.get("attrs") if isinstance(data.get("attrs"), dict) else {}
    content = data.get("content")
    children = tuple(parse_node(c) for c in content) if isinstance(content, list) else ()

    if kind == "text":
        raw_marks = data.get("marks")
        if not isinstance(raw_marks, list):
            raw_marks = []
        marks = tuple(m.get("type", "") for m in raw_marks if isinstance(m, dict))
        return Text(str(data.get("text", "")), marks)
    if kind == "hardBreak":
        return HardBreak()
    if kind == "paragraph":
        return Paragraph(children)
    if kind == "heading":
        level = attrs.get("level", 1)
        return Heading(level if isinstance(level, int) else 1, children)
    if kind == "listItem":
        return ListItem(children)
    return Other(kind, children, attrs)


def _is_inline(node: Node) -> bool:
    return isinstance(node, (Text, HardBreak)) or (isinstance(node, Other) and not node.children)


def flatten(node: Node) -> str:
    """Fold a tree depth-first into plain text.

    Inline runs are concatenated; blocks are joined with newlines and empty
    blocks dropped. Leaves of unknown type contribute ``attrs["text"]`` when
    they carry one (mentions, emoji).
    """
    if isinstance(node, Text):
        return node.text
    if isinstance(node, HardBreak):
        return "\n"
    if isinstance(node, Other) and not node.children:
        text = node.attrs.get("text")
        return text if isinstance(text, str) else ""

    blocks: list[str] = []
    run: list[str] = []
    for child in node.children:
        if _is_inline(child):
            run.append(flatten(child))
            continue
        if run:
            blocks.append("".join(run))
            run = []
        blocks.append(flatten(child))
    if run:
        blocks.append("".join(run))
    return "\n".join(b for b in blocks if b)


# --- Serialising ---


def to_json(node: Node) -> dict[str, Any]:
    """Serialise a tree to the wire format."""
    if isinstance(node, Text):
        data: dict[str, Any] = {"type": "text", "text": node.text}
        if node.marks:
            data["marks"] = [{"type": m} for m in node.marks]
        return data
    if isinstance(node, HardBreak):
        return {"type": "hardBreak"}
    if isinstance(node, Paragraph):
        return {"type": "paragraph", "content": [to_json(c) for c in node.children]}
    if isinstance(node, Heading):
        return {
            "type": "heading",
            "attrs": {"level": node.level},
            "content": [to_json(c) for c in node.children],
        }
    if isinstance(node, ListItem):
        return {"type": "listItem", "content": [to_json(c) for c in node.children]}

    data = {"type": node.type}
    if node.type == "doc":
        data["version"] = 1
    if node.attrs:
        data["attrs"] = dict(node.attrs)
    if node.children or node.type == "doc":
        data["content"] = [to_json(c) for c in node.children]
    return data


# --- Building from markdown ---

_BLOCKS = {
    "bullet_list": "bulletList",
    "ordered_list": "orderedList",
    "blockquote": "blockquote",
}

_MARKS = {"strong": "strong", "em": "em", "s": "strike"}


def from_text(text: str) -> Other:
    """Build a document from markdown-ish plain text.

    Paragraphs, headings, lists, block quotes and code become their document
    counterparts; line breaks inside a paragraph become hardBreak nodes.
    """
    # Raw HTML stays literal text rather than vanishing as an html_block
    md = MarkdownIt("commonmark", {"html": False})
    root: list[Node] = []
    stack: list[tuple[Token, list[Node]]] = []

    def current() -> list[Node]:
        return stack[-1][1] if stack else root

    for token in md.parse(text):
        if token.nesting == 1:
            stack.append((token, []))
        elif token.nesting == -1:
            opener, children = stack.pop()
            current().append(_block(opener, children))
        elif token.type == "inline":
            current().extend(_inline(token.children or []))
        elif token.type in ("fence", "code_block"):
            code = token.content.rstrip("\n")
            attrs = {"language": token.info.strip()} if token.info.strip() else {}
            current().append(Other("codeBlock", (Text(code),) if code else (), attrs))
        elif token.type == "hr":
            current().append(Other("rule"))
    return Other("doc", tuple(root))


def _block(opener: Token, children: list[Node]) -> Node:
    kind = opener.type.removesuffix("_open")
    if kind == "paragraph":
        return Paragraph(tuple(children))
    if kind == "heading":
        return Heading(int(opener.tag[1:]), tuple(children))
    if kind == "list_item":
        return ListItem(tuple(children))
    return Other(_BLOCKS.get(kind, kind), tuple(children))


def _inline(tokens: list[Token]) -> list[Node]:
    nodes: list[Node] = []
    marks: list[str] = []

    def add_text(content: str, extra: tuple[str, ...] = ()) -> None:
        if not content:
            return
        node_marks = tuple(marks) + extra
        if nodes and isinstance(nodes[-1], Text) and nodes[-1].marks == node_marks:
            nodes[-1] = Text(nodes[-1].text + content, node_marks)
        else:
            nodes.append(Text(content, node_marks))

    for token in tokens:
        base = token.type.removesuffix("_open").removesuffix("_close")
        if token.type == "text":
            add_text(token.content)
        elif token.type == "code_inline":
            add_text(token.content, ("code",))
        elif token.type in ("softbreak", "hardbreak"):
            nodes.append(HardBreak())
        elif base in _MARKS:
            mark = _MARKS[base]
            if token.nesting == 1:
                marks.append(mark)
            elif mark in marks:
                marks.remove(mark)
        elif token.type == "image":
            add_text(token.content)
    return nodes
