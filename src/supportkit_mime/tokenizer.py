"""MIME tokenizer: boundary discovery, literal splitting and the part tree.

A raw body is turned into a small tagged tree before anything is decoded::

    MimeNode = MimeLeaf | MimeMultipart

Boundary tokens come from untrusted input, so they are only ever compared
as literal delimiter lines (``--token`` and ``--token--``) and never
compiled into a pattern.  Recursion into nested ``multipart/*`` parts is
capped by the builder's ``max_depth``; a part below that depth is kept as
an opaque leaf.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

from supportkit_mime.errors import ErrorCode
from supportkit_mime.models import TransferEncoding

logger = logging.getLogger("supportkit_mime")

_BINARY_MAINTYPES = frozenset({"image", "application", "audio", "video"})

_MULTIPART_HEADER = re.compile(r"Content-Type:\s*multipart/", re.IGNORECASE)
_HEADER_FIELD_END = re.compile(r"\r?\n(?![ \t])")
_BOUNDARY_PARAM = re.compile(
    r"""boundary\s*=\s*(?:"([^"\r\n]+)"|'([^'\r\n]+)'|([^"'\s;]+))""",
    re.IGNORECASE,
)
_IMPLICIT_BOUNDARY = re.compile(r"^--([^\r\n]+)", re.MULTILINE)

_CONTENT_TYPE = re.compile(r"^Content-Type:\s*([^;\r\n]+)", re.IGNORECASE | re.MULTILINE)
_CHARSET_PARAM = re.compile(r"""charset\s*=\s*["']?([^"';\s]+)""", re.IGNORECASE)
_TRANSFER_ENCODING = re.compile(
    r"^Content-Transfer-Encoding:\s*([^\s;]+)", re.IGNORECASE | re.MULTILINE
)
_ATTACHMENT_DISPOSITION = re.compile(
    r"^Content-Disposition:\s*attachment", re.IGNORECASE | re.MULTILINE
)


# ---------------------------------------------------------------------------
# Part headers
# ---------------------------------------------------------------------------


@dataclass
class PartHeaders:
    """The handful of header facts the extractor needs from one part."""

    content_type: str | None = None
    charset: str | None = None
    transfer_encoding: TransferEncoding = TransferEncoding.IDENTITY
    attachment_disposition: bool = False
    boundary: str | None = None

    @property
    def is_multipart(self) -> bool:
        return self.content_type is not None and self.content_type.startswith("multipart/")

    @property
    def is_attachment(self) -> bool:
        """Disposition says attachment, or the type is binary media/data."""
        if self.attachment_disposition:
            return True
        if self.content_type is None or "text/" in self.content_type:
            return False
        return self.content_type.partition("/")[0] in _BINARY_MAINTYPES


def _boundary_param(field_value: str) -> str | None:
    match = _BOUNDARY_PARAM.search(field_value)
    if match is None:
        return None
    token = next(group for group in match.groups() if group is not None).strip()
    return token or None


def parse_headers(header_block: str) -> PartHeaders:
    """Pull content type, charset, encoding, disposition and boundary."""
    headers = PartHeaders()

    content_type = _CONTENT_TYPE.search(header_block)
    if content_type is None:
        return headers
    headers.content_type = content_type.group(1).strip().lower() or None

    charset = _CHARSET_PARAM.search(header_block)
    if charset is not None:
        headers.charset = charset.group(1)

    encoding = _TRANSFER_ENCODING.search(header_block)
    headers.transfer_encoding = TransferEncoding.from_header(
        encoding.group(1) if encoding else None
    )
    headers.attachment_disposition = _ATTACHMENT_DISPOSITION.search(header_block) is not None

    if headers.is_multipart:
        headers.boundary = _boundary_param(header_block)
    return headers


def split_part(segment: str) -> tuple[PartHeaders, str | None]:
    """Split a segment at its first blank line into headers and content.

    The content is returned untouched (not trimmed); it is None when the
    segment has no blank line at all.
    """
    lines = segment.split("\n")
    for index, line in enumerate(lines):
        if not line.strip():
            header_block = "\n".join(lines[:index])
            return parse_headers(header_block), "\n".join(lines[index + 1 :])
    return parse_headers(segment), None


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------


def implicit_boundary(text: str) -> str | None:
    """Token of the first line starting with ``--``, if any."""
    match = _IMPLICIT_BOUNDARY.search(text)
    if match is None:
        return None
    return match.group(1).strip() or None


def discover_boundary(text: str) -> tuple[str | None, bool]:
    """Find the multipart boundary of *text*.

    A ``Content-Type: multipart/...`` header anywhere in the text wins,
    which covers bodies stored from the middle of their header block.
    Otherwise the first ``--token`` line is used as an implicit boundary.

    Returns
    -------
    tuple[str | None, bool]
        The boundary (None when the body is not MIME-structured) and
        whether it was declared by a header.
    """
    for match in _MULTIPART_HEADER.finditer(text):
        end = _HEADER_FIELD_END.search(text, match.end())
        field_value = text[match.end() : end.start() if end else len(text)]
        boundary = _boundary_param(field_value)
        if boundary is not None:
            return boundary, True
    return implicit_boundary(text), False


@dataclass
class BoundarySplit:
    """A body cut at its delimiter lines."""

    preamble: str
    segments: list[str]
    terminated: bool


def split_on_boundary(text: str, boundary: str) -> BoundarySplit | None:
    """Cut *text* at literal ``--boundary`` / ``--boundary--`` lines.

    Anything after the terminator is epilogue and dropped.  Returns None
    when no delimiter line is present at all.
    """
    delimiter = f"--{boundary}"
    terminator = f"{delimiter}--"

    preamble: list[str] = []
    segments: list[list[str]] = []
    current = preamble
    terminated = False

    for line in text.split("\n"):
        marker = line.rstrip()
        if marker == terminator:
            terminated = True
            break
        if marker == delimiter:
            current = []
            segments.append(current)
            continue
        current.append(line)

    if not segments and not terminated:
        return None

    return BoundarySplit(
        preamble="\n".join(preamble),
        segments=["\n".join(segment) for segment in segments],
        terminated=terminated,
    )


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------


@dataclass
class MimeLeaf:
    """A single part.  ``content`` is still transfer-encoded, but trimmed.

    ``opaque`` marks a multipart part that was not expanded (depth limit
    or unusable boundary).
    """

    headers: PartHeaders
    content: str | None = None
    opaque: bool = False


@dataclass
class MimeMultipart:
    """A multipart container and its parts in document order."""

    boundary: str
    parts: list[MimeNode] = field(default_factory=list)
    terminated: bool = True
    headers: PartHeaders | None = None


MimeNode = Union[MimeLeaf, MimeMultipart]


def iter_leaves(node: MimeNode) -> Iterator[MimeLeaf]:
    """Yield every leaf below *node* in document order."""
    if isinstance(node, MimeLeaf):
        yield node
        return
    for part in node.parts:
        yield from iter_leaves(part)


class MimeTreeBuilder:
    """Build a :class:`MimeMultipart` tree from a raw body.

    One builder per body: non-fatal problems met while building are
    collected on :attr:`warnings`.
    """

    def __init__(self, max_depth: int = 10) -> None:
        self.max_depth = max_depth
        self.warnings: list[ErrorCode] = []

    def build(self, raw: str) -> MimeMultipart | None:
        """Return the tree, or None when *raw* is not MIME-structured."""
        boundary, declared = discover_boundary(raw)
        if boundary is None:
            return None

        root = self._build_multipart(raw, boundary, depth=0, headers=None)
        if root is None:
            self._warn(ErrorCode.W_MIME_BOUNDARY_MISMATCH)
            logger.debug(
                "supportkit_mime | boundary=%s | declared=%s | detail=no delimiter lines",
                boundary,
                declared,
            )
        return root

    def _warn(self, code: ErrorCode) -> None:
        self.warnings.append(code)

    def _build_multipart(
        self,
        text: str,
        boundary: str,
        depth: int,
        headers: PartHeaders | None,
    ) -> MimeMultipart | None:
        split = split_on_boundary(text, boundary)
        if split is None:
            return None
        if not split.terminated:
            self._warn(ErrorCode.W_MIME_UNTERMINATED)

        node = MimeMultipart(boundary=boundary, terminated=split.terminated, headers=headers)

        # A preamble only counts when it is itself a headed, non-multipart
        # part (body stored starting inside its first part).
        preamble_headers, preamble_content = split_part(split.preamble)
        if preamble_headers.content_type is not None and not preamble_headers.is_multipart:
            node.parts.append(_leaf(preamble_headers, preamble_content))

        for segment in split.segments:
            part = self._build_part(segment, depth)
            if part is not None:
                node.parts.append(part)
        return node

    def _build_part(self, segment: str, depth: int) -> MimeNode | None:
        headers, content = split_part(segment)
        if headers.content_type is None:
            return None
        if headers.is_attachment or not headers.is_multipart:
            return _leaf(headers, content)

        if content is None:
            return MimeLeaf(headers=headers, opaque=True)
        if depth + 1 > self.max_depth:
            self._warn(ErrorCode.W_MIME_DEPTH_LIMIT)
            return MimeLeaf(headers=headers, content=content.strip(), opaque=True)

        boundary = headers.boundary or implicit_boundary(content)
        if boundary is None:
            return MimeLeaf(headers=headers, content=content.strip(), opaque=True)

        child = self._build_multipart(content, boundary, depth + 1, headers)
        if child is None:
            self._warn(ErrorCode.W_MIME_BOUNDARY_MISMATCH)
            return MimeLeaf(headers=headers, content=content.strip(), opaque=True)
        return child


def _leaf(headers: PartHeaders, content: str | None) -> MimeLeaf:
    return MimeLeaf(headers=headers, content=content.strip() if content is not None else None)
