"""Text normalization and media detection for posts."""

from __future__ import annotations

import re
import unicodedata

from safetykit.moderation.models import Post

IMAGE_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "png", "gif", "webp", "bmp", "tif", "tiff", "svg", "heic", "heif"}
)

_LINK_PATTERN = re.compile(r"(?i)(?:\bhttps?://|\bwww\.)\S+")
_MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\([^)\s]+[^)]*\)")


def strip_accents(text: str) -> str:
    """Remove diacritics: decompose, drop combining marks, recompose.

    ``strip_accents("café") == "cafe"``; the function is idempotent.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return unicodedata.normalize("NFC", stripped)


def strip_accents_with_offsets(text: str) -> tuple[str, list[int]]:
    """Strip accents per character, keeping a map back to *text*.

    Returns ``(stripped, offsets)`` where ``offsets[i]`` is the index in
    *text* of the character that produced ``stripped[i]``. Combining marks
    that stand alone vanish, so a match found in ``stripped`` can always be
    mapped back onto the original characters.
    """
    chars: list[str] = []
    offsets: list[int] = []
    for index, char in enumerate(text):
        for out in strip_accents(char):
            chars.append(out)
            offsets.append(index)
    return "".join(chars), offsets


def contains_links(post: Post) -> bool:
    """True for an embed in the metadata or an http(s):// / www. token."""
    if post.metadata is not None and post.metadata.embeds:
        return True
    return bool(_LINK_PATTERN.search(post.message))


def is_image_file(name: str, extension: str = "") -> bool:
    ext = extension
    if not ext and "." in name:
        ext = name.rpartition(".")[2]
    return ext.lower().lstrip(".") in IMAGE_EXTENSIONS


def contains_images(post: Post) -> bool:
    """True for an image attachment, an image embed, or markdown image syntax.

    Attachments referenced only by file id are resolved by the pipeline,
    which has access to the host.
    """
    metadata = post.metadata
    if metadata is not None:
        if any(is_image_file(f.name, f.extension) for f in metadata.files):
            return True
        if metadata.images:
            return True
        if any(e.type == "image" for e in metadata.embeds):
            return True
    return bool(_MARKDOWN_IMAGE_PATTERN.search(post.message))
