"""Post models passed through the content filter pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

# Post prop set by the host on messages sent by bots and integrations.
FROM_BOT_PROP = "from_bot"


@dataclass
class FileInfo:
    """Metadata for an attached file."""

    id: str = ""
    name: str = ""
    extension: str = ""  # with or without the leading dot


@dataclass
class Embed:
    """A link preview or media embed attached to a post."""

    type: str = ""  # "opengraph" | "image" | "link" | ...
    url: str = ""


@dataclass
class PostMetadata:
    """Host-computed metadata; often empty while a post is being created."""

    files: list[FileInfo] = field(default_factory=list)
    embeds: list[Embed] = field(default_factory=list)
    images: dict[str, dict] = field(default_factory=dict)  # url -> image info


@dataclass
class Post:
    """An outgoing or edited chat message."""

    user_id: str
    channel_id: str = ""
    message: str = ""
    id: str = ""
    root_id: str = ""
    props: dict = field(default_factory=dict)
    file_ids: list[str] = field(default_factory=list)
    metadata: PostMetadata | None = None

    @property
    def from_bot(self) -> bool:
        return FROM_BOT_PROP in self.props


@dataclass
class FilterResult:
    """Outcome of filtering a post.

    ``post`` is the (possibly censored) post to publish, or ``None`` when the
    post is rejected, in which case ``rejection`` carries the reason.
    """

    post: Post | None
    rejection: str = ""

    @property
    def rejected(self) -> bool:
        return self.post is None

    @classmethod
    def allow(cls, post: Post) -> FilterResult:
        return cls(post=post)

    @classmethod
    def reject(cls, reason: str) -> FilterResult:
        return cls(post=None, rejection=reason)
