"""Portable text (rich product descriptions) parsing and rendering.

Descriptions arrive as a list of typed blocks. Text blocks carry a style
(normal, h2, h3, h4, blockquote), an optional list item kind (bullet,
number) and spans with decorator marks or references to link annotations.
Any other block type is kept as an opaque block and skipped by renderers.
"""
import html
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from pydantic import BaseModel, Field


class LinkAnnotation(BaseModel):
    key: str = Field(..., alias="_key")
    type: str = Field("link", alias="_type")
    href: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "ignore"


class Span(BaseModel):
    text: str = ""
    marks: List[str] = Field(default_factory=list)

    class Config:
        extra = "ignore"


class TextBlock(BaseModel):
    key: Optional[str] = Field(None, alias="_key")
    style: str = "normal"
    list_item: Optional[str] = Field(None, alias="listItem")
    level: int = 1
    children: List[Span] = Field(default_factory=list)
    mark_defs: List[LinkAnnotation] = Field(default_factory=list, alias="markDefs")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @property
    def text(self) -> str:
        return "".join(child.text for child in self.children)


class OpaqueBlock(BaseModel):
    """A block type the renderers do not know (images, embeds...)."""
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)


Block = Union[TextBlock, OpaqueBlock]


def parse_blocks(raw_blocks: Optional[List[Dict[str, Any]]]) -> List[Block]:
    """
    Parse raw portable text into typed blocks.

    Args:
        raw_blocks: Block dictionaries as returned by the content store

    Returns:
        List of TextBlock / OpaqueBlock instances
    """
    blocks: List[Block] = []
    for raw in raw_blocks or []:
        block_type = raw.get("_type", "block")
        if block_type == "block":
            spans = [
                child for child in raw.get("children") or []
                if child.get("_type", "span") == "span"
            ]
            blocks.append(TextBlock.model_validate({**raw, "children": spans}))
        else:
            blocks.append(OpaqueBlock(type=block_type, data=raw))
    return blocks


def _ensure_blocks(blocks) -> List[Block]:
    if blocks and isinstance(blocks[0], dict):
        return parse_blocks(blocks)
    return list(blocks or [])


def to_plain_text(blocks) -> str:
    """Join the text of all text blocks with single spaces."""
    parts = [block.text for block in _ensure_blocks(blocks) if isinstance(block, TextBlock)]
    return " ".join(parts).strip()


def preview_text(blocks, max_length: int = 150) -> Tuple[str, bool]:
    """
    Build a truncated plain-text preview of a description.

    Returns:
        Tuple of (display text, whether it was truncated)
    """
    text = to_plain_text(blocks)
    if len(text) > max_length:
        return f"{text[:max_length]}...", True
    return text, False


# HTML dispatch tables

BLOCK_RENDERERS: Dict[str, Callable[[str], str]] = {
    "normal": lambda inner: f"<p>{inner}</p>",
    "h2": lambda inner: f"<h2>{inner}</h2>",
    "h3": lambda inner: f"<h3>{inner}</h3>",
    "h4": lambda inner: f"<h4>{inner}</h4>",
    "blockquote": lambda inner: f"<blockquote>{inner}</blockquote>",
}

LIST_RENDERERS: Dict[str, Callable[[str], str]] = {
    "bullet": lambda inner: f"<ul>{inner}</ul>",
    "number": lambda inner: f"<ol>{inner}</ol>",
}

MARK_RENDERERS: Dict[str, Callable[[str], str]] = {
    "strong": lambda inner: f"<strong>{inner}</strong>",
    "em": lambda inner: f"<em>{inner}</em>",
    "underline": lambda inner: f'<span class="underline">{inner}</span>',
    "code": lambda inner: f"<code>{inner}</code>",
}


def _render_link(inner: str, annotation: LinkAnnotation) -> str:
    href = html.escape(annotation.href or "", quote=True)
    if annotation.href and annotation.href.startswith("http"):
        return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{inner}</a>'
    return f'<a href="{href}">{inner}</a>'


def _render_span(span: Span, annotations: Dict[str, LinkAnnotation]) -> str:
    rendered = html.escape(span.text)
    for mark in span.marks:
        if mark in MARK_RENDERERS:
            rendered = MARK_RENDERERS[mark](rendered)
        elif mark in annotations:
            rendered = _render_link(rendered, annotations[mark])
    return rendered


def _render_inline(block: TextBlock) -> str:
    annotations = {definition.key: definition for definition in block.mark_defs}
    return "".join(_render_span(span, annotations) for span in block.children)


def to_html(blocks) -> str:
    """
    Render portable text to HTML.

    Consecutive list items of the same kind are grouped into one list.
    Unknown block styles fall back to a paragraph.
    """
    output: List[str] = []
    pending_kind: Optional[str] = None
    pending_items: List[str] = []

    def flush_list():
        nonlocal pending_kind, pending_items
        if pending_kind is not None:
            renderer = LIST_RENDERERS.get(pending_kind, LIST_RENDERERS["bullet"])
            output.append(renderer("".join(pending_items)))
        pending_kind = None
        pending_items = []

    for block in _ensure_blocks(blocks):
        if not isinstance(block, TextBlock):
            continue
        inner = _render_inline(block)
        if block.list_item:
            if block.list_item != pending_kind:
                flush_list()
                pending_kind = block.list_item
            pending_items.append(f"<li>{inner}</li>")
            continue
        flush_list()
        renderer = BLOCK_RENDERERS.get(block.style, BLOCK_RENDERERS["normal"])
        output.append(renderer(inner))

    flush_list()
    return "".join(output)
