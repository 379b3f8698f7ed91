"""Tests for rich-text document parsing, flattening and building."""

from tickit.model.adf import (
    HardBreak,
    Heading,
    ListItem,
    Other,
    Paragraph,
    Text,
    flatten,
    from_text,
    parse_node,
    to_json,
)


def _doc(*content):
    return {"type": "doc", "version": 1, "content": list(content)}


def _para(*content):
    return {"type": "paragraph", "content": list(content)}


def _text(text, *marks):
    node = {"type": "text", "text": text}
    if marks:
        node["marks"] = [{"type": m} for m in marks]
    return node


def test_parse_known_nodes():
    node = parse_node(
        _doc(
            {"type": "heading", "attrs": {"level": 2}, "content": [_text("Title")]},
            _para(_text("bold", "strong"), {"type": "hardBreak"}),
        )
    )
    assert isinstance(node, Other)
    assert node.type == "doc"
    heading, para = node.children
    assert heading == Heading(2, (Text("Title"),))
    assert para == Paragraph((Text("bold", ("strong",)), HardBreak()))


def test_parse_non_dict_is_empty_other():
    assert parse_node("nonsense") == Other("unknown")


def test_flatten_paragraphs_join_with_newlines():
    doc = parse_node(_doc(_para(_text("First")), _para(_text("Second"))))
    assert flatten(doc) == "First\nSecond"


def test_flatten_inline_runs_concatenate():
    """Marked spans inside one paragraph stay on one line."""
    doc = parse_node(_doc(_para(_text("This is "), _text("bold", "strong"), _text(" text"))))
    assert flatten(doc) == "This is bold text"


def test_flatten_hard_break():
    doc = parse_node(_doc(_para(_text("line one"), {"type": "hardBreak"}, _text("line two"))))
    assert flatten(doc) == "line one\nline two"


def test_flatten_lists():
    doc = parse_node(
        _doc(
            {
                "type": "bulletList",
                "content": [
                    {"type": "listItem", "content": [_para(_text("one"))]},
                    {"type": "listItem", "content": [_para(_text("two"))]},
                ],
            }
        )
    )
    assert flatten(doc) == "one\ntwo"


def test_flatten_unknown_types_recurse():
    """Node kinds we have never seen still give up their text."""
    doc = parse_node(
        _doc({"type": "panel", "attrs": {"panelType": "info"}, "content": [_para(_text("inside"))]})
    )
    assert flatten(doc) == "inside"


def test_flatten_mention_uses_attr_text():
    doc = parse_node(
        _doc(_para(_text("ping "), {"type": "mention", "attrs": {"id": "1", "text": "@Ann"}}))
    )
    assert flatten(doc) == "ping @Ann"


def test_flatten_drops_empty_blocks():
    doc = parse_node(_doc(_para(), _para(_text("kept")), {"type": "rule"}))
    assert flatten(doc) == "kept"


def test_flatten_empty_doc():
    assert flatten(parse_node(_doc())) == ""


def test_to_json_doc_shape():
    doc = Other("doc", (Paragraph((Text("hi", ("em",)),)),))
    assert to_json(doc) == _doc(_para(_text("hi", "em")))


def test_to_json_empty_doc_keeps_content():
    assert to_json(Other("doc")) == {"type": "doc", "version": 1, "content": []}


def test_from_text_paragraphs():
    doc = from_text("First paragraph\n\nSecond paragraph")
    assert doc.children == (
        Paragraph((Text("First paragraph"),)),
        Paragraph((Text("Second paragraph"),)),
    )


def test_from_text_line_break_becomes_hard_break():
    doc = from_text("one\ntwo")
    assert doc.children == (Paragraph((Text("one"), HardBreak(), Text("two"))),)


def test_from_text_marks():
    doc = from_text("plain **bold** and `code`")
    (para,) = doc.children
    assert para.children == (
        Text("plain "),
        Text("bold", ("strong",)),
        Text(" and "),
        Text("code", ("code",)),
    )


def test_from_text_heading_and_list():
    doc = from_text("# Title\n\n- one\n- two\n")
    heading, bullets = doc.children
    assert heading == Heading(1, (Text("Title"),))
    assert isinstance(bullets, Other)
    assert bullets.type == "bulletList"
    assert bullets.children == (
        ListItem((Paragraph((Text("one"),)),)),
        ListItem((Paragraph((Text("two"),)),)),
    )


def test_from_text_code_block():
    doc = from_text("```python\nprint(1)\n```\n")
    (block,) = doc.children
    assert block == Other("codeBlock", (Text("print(1)"),), {"language": "python"})


def test_from_text_empty():
    assert from_text("") == Other("doc")


def test_from_text_flattens_back():
    text = "Deploy notes\n\n- step one\n- step two"
    assert flatten(from_text(text)) == "Deploy notes\nstep one\nstep two"


def test_parse_text_with_malformed_marks():
    node = parse_node({"type": "text", "text": "plain", "marks": 5})
    assert node == Text("plain")


def test_from_text_keeps_html_like_text():
    assert flatten(from_text("<br>")) == "<br>"
    assert flatten(from_text("<!-- todo -->")) == "<!-- todo -->"
    assert "<x>1</x>" in flatten(from_text("<config>\n  <x>1</x>\n</config>"))
    assert to_json(from_text("<br>"))["content"]
