"""Tests for portable text parsing and rendering."""
from storefront.data.portable_text import OpaqueBlock, TextBlock, parse_blocks, preview_text, to_html, to_plain_text


def block(text, style="normal", marks=None, list_item=None, mark_defs=None):
    raw = {
        "_type": "block",
        "_key": text[:8],
        "style": style,
        "children": [{"_type": "span", "text": text, "marks": marks or []}],
        "markDefs": mark_defs or [],
    }
    if list_item:
        raw["listItem"] = list_item
    return raw


def test_parse_blocks_keeps_unknown_types_opaque():
    blocks = parse_blocks([block("Hello"), {"_type": "image", "asset": {"_ref": "image-a-1x1-png"}}])

    assert isinstance(blocks[0], TextBlock)
    assert blocks[0].text == "Hello"
    assert isinstance(blocks[1], OpaqueBlock)
    assert blocks[1].type == "image"


def test_plain_text_joins_text_blocks():
    raw = [block("Soft wool."), {"_type": "image"}, block("Machine washable.")]
    assert to_plain_text(raw) == "Soft wool. Machine washable."
    assert to_plain_text([]) == ""


def test_preview_text_truncates():
    raw = [block("x" * 200)]
    text, truncated = preview_text(raw, max_length=150)
    assert truncated
    assert text == "x" * 150 + "..."

    assert preview_text([block("short")]) == ("short", False)


def test_block_styles():
    raw = [block("Title", style="h2"), block("Quote", style="blockquote"), block("Body", style="unknown")]
    assert to_html(raw) == "<h2>Title</h2><blockquote>Quote</blockquote><p>Body</p>"


def test_lists_group_consecutive_items():
    raw = [
        block("one", list_item="bullet"),
        block("two", list_item="bullet"),
        block("first", list_item="number"),
        block("after"),
    ]
    assert to_html(raw) == "<ul><li>one</li><li>two</li></ul><ol><li>first</li></ol><p>after</p>"


def test_decorator_marks():
    assert to_html([block("bold", marks=["strong"])]) == "<p><strong>bold</strong></p>"
    assert to_html([block("both", marks=["strong", "em"])]) == "<p><em><strong>both</strong></em></p>"
    assert to_html([block("under", marks=["underline"])]) == '<p><span class="underline">under</span></p>'


def test_links():
    external = block("shop", marks=["l1"], mark_defs=[{"_key": "l1", "_type": "link", "href": "https://example.com"}])
    internal = block("home", marks=["l2"], mark_defs=[{"_key": "l2", "_type": "link", "href": "/products"}])

    assert to_html([external]) == '<p><a href="https://example.com" target="_blank" rel="noopener noreferrer">shop</a></p>'
    assert to_html([internal]) == '<p><a href="/products">home</a></p>'


def test_text_is_escaped():
    assert to_html([block("<b>&</b>")]) == "<p>&lt;b&gt;&amp;&lt;/b&gt;</p>"
