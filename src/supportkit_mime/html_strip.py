"""HTML-to-text conversion used when a message has no text/plain part.

Provides :func:`html_to_text`, a fixed, order-sensitive substitution
pipeline:

- Remove ``<style>`` and ``<script>`` blocks with their content
- Convert ``<br>`` to a newline, ``</p>`` to a paragraph break and
  ``</div>`` to a newline
- Strip every remaining tag
- Decode the common HTML entities
- Collapse runs of blank lines and trim
"""

from __future__ import annotations

import re

_STYLE_BLOCK = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_BLOCK = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PARAGRAPH_END = re.compile(r"</p>", re.IGNORECASE)
_DIV_END = re.compile(r"</div>", re.IGNORECASE)
_ROW_OR_ITEM_END = re.compile(r"</(?:tr|li)>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# Decoded strictly in this order.
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def html_to_text(html_content: str, *, list_breaks: bool = False) -> str:
    """Convert HTML to plain text.

    Parameters
    ----------
    html_content:
        Raw HTML string.
    list_breaks:
        Also end table rows and list items with a newline.  The display
        cleaner turns this on.

    Returns
    -------
    str
        Plain text with at most one blank line between paragraphs.
    """
    if not html_content:
        return ""

    text = html_content.replace("\r\n", "\n")
    text = _STYLE_BLOCK.sub("", text)
    text = _SCRIPT_BLOCK.sub("", text)
    text = _LINE_BREAK.sub("\n", text)
    text = _PARAGRAPH_END.sub("\n\n", text)
    text = _DIV_END.sub("\n", text)
    if list_breaks:
        text = _ROW_OR_ITEM_END.sub("\n", text)
    text = _TAG.sub("", text)

    for entity, char in _ENTITIES:
        text = text.replace(entity, char)

    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()
