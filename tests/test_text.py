"""Tests for text normalization and media detection."""

from safetykit.moderation.models import Embed, FileInfo, Post, PostMetadata
from safetykit.moderation.text import (
    contains_images,
    contains_links,
    is_image_file,
    strip_accents,
    strip_accents_with_offsets,
)


def _post(message="", metadata=None):
    return Post(user_id="u1", message=message, metadata=metadata)


def test_strip_accents():
    assert strip_accents("café") == "cafe"
    assert strip_accents("Ünïcödé") == "Unicode"


def test_strip_accents_idempotent():
    once = strip_accents("crème brûlée")
    assert strip_accents(once) == once


def test_strip_accents_decomposed_input():
    assert strip_accents("cafe\u0301") == "cafe"


def test_offsets_map_back_to_original():
    stripped, offsets = strip_accents_with_offsets("b\u00e2d e\u0301")
    assert stripped == "bad e"
    assert offsets == [0, 1, 2, 3, 4]


def test_links_in_text():
    assert contains_links(_post("see https://example.com/x"))
    assert contains_links(_post("go to www.example.com"))
    assert not contains_links(_post("no links here, example dot com"))


def test_links_from_embeds():
    metadata = PostMetadata(embeds=[Embed(type="opengraph", url="https://example.com")])
    assert contains_links(_post("preview", metadata))


def test_is_image_file():
    assert is_image_file("cat.PNG")
    assert is_image_file("upload", ".jpg")
    assert is_image_file("photo", "jpeg")
    assert not is_image_file("notes.txt")
    assert not is_image_file("README")


def test_images_from_attachments():
    metadata = PostMetadata(files=[FileInfo(id="f1", name="cat.png", extension="png")])
    assert contains_images(_post("", metadata))
    metadata = PostMetadata(files=[FileInfo(id="f2", name="a.pdf", extension="pdf")])
    assert not contains_images(_post("", metadata))


def test_images_from_embeds_and_markdown():
    assert contains_images(_post("", PostMetadata(embeds=[Embed(type="image", url="x")])))
    assert contains_images(_post("", PostMetadata(images={"https://x/y.png": {}})))
    assert contains_images(_post("look ![cat](https://example.com/cat.png)"))
    assert not contains_images(_post("just text"))


def test_offset_stripping_agrees_with_strip_accents():
    text = "crème brûlée, Ünïcödé and café"
    assert strip_accents_with_offsets(text)[0] == strip_accents(text)
