"""Search data models.

Covers both sides of the index: the post rows the builder consumes and the
three artifact shapes the query engine accepts. Artifacts form a tagged union
discriminated by ``kind`` so scoring dispatches in exactly one place.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

import orjson

from blog_search.search.errors import ArtifactFormatError, InvalidPostError


PostWidth = Literal["small", "medium", "large"]
DEFAULT_WIDTH: PostWidth = "medium"
_NULL_STRINGS = frozenset({"", "null", "undefined"})
TAG_DELIMITER = "||"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    if text.strip().lower() in _NULL_STRINGS:
        return None
    return text


def _required_str(value: Any) -> str:
    return "" if value is None else str(value)


def parse_tags(value: Any) -> tuple[str, ...]:
    """Normalize the tag shapes the content source produces into an ordered tuple.

    Accepts a sequence, a JSON encoded array string, or a ``||`` delimited
    string. Null entries and blanks are dropped; order is preserved.
    """

    if value is None:
        return ()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ()
        if text.startswith("["):
            try:
                decoded = orjson.loads(text)
            except orjson.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                return parse_tags(decoded)
        raw: Sequence[Any] = text.split(TAG_DELIMITER)
    elif isinstance(value, Sequence):
        raw = value
    else:
        return ()

    tags: list[str] = []
    for item in raw:
        tag = _optional_str(item)
        if tag is None:
            continue
        tag = tag.strip()
        if tag:
            tags.append(tag)
    return tuple(tags)


@dataclass(frozen=True, slots=True)
class DocMeta:
    """Public-facing projection of a post, stored with every indexed document."""

    slug: str
    title: str = ""
    date: str = ""
    timezone: str = ""
    author: str = ""
    path: str | None = None
    excerpt: str | None = None
    tags: tuple[str, ...] = ()
    thumbnail: str | None = None
    width: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting absent optional fields and empty tags."""

        data: dict[str, Any] = {}
        if self.path is not None:
            data["path"] = self.path
        data["slug"] = self.slug
        data["title"] = self.title
        data["date"] = self.date
        data["timezone"] = self.timezone
        if self.excerpt is not None:
            data["excerpt"] = self.excerpt
        data["author"] = self.author
        if self.tags:
            data["tags"] = list(self.tags)
        if self.thumbnail is not None:
            data["thumbnail"] = self.thumbnail
        if self.width is not None:
            data["width"] = self.width
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DocMeta:
        if not isinstance(data, Mapping):
            raise ArtifactFormatError(f"Document metadata must be an object, got {type(data).__name__}")
        return cls(
            slug=_required_str(data.get("slug")),
            title=_required_str(data.get("title")),
            date=_required_str(data.get("date")),
            timezone=_required_str(data.get("timezone")),
            author=_required_str(data.get("author")),
            path=_optional_str(data.get("path")),
            excerpt=_optional_str(data.get("excerpt")),
            tags=parse_tags(data.get("tags")),
            thumbnail=_optional_str(data.get("thumbnail")),
            width=_optional_str(data.get("width")),
        )


@dataclass(frozen=True, slots=True)
class PostRecord:
    """A post row as exported by the content source."""

    slug: str
    title: str = ""
    date: str = ""
    timezone: str = ""
    author: str = ""
    content: str = ""
    path: str | None = None
    excerpt: str | None = None
    tags: tuple[str, ...] = ()
    thumbnail: str | None = None
    width: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> PostRecord:
        """Build a record from a raw row, raising ``InvalidPostError`` if it cannot be indexed."""

        if not isinstance(row, Mapping):
            raise InvalidPostError(f"Row must be an object, got {type(row).__name__}")
        slug = _optional_str(row.get("slug"))
        if slug is None or not slug.strip():
            raise InvalidPostError("Row is missing required field 'slug'")

        date = row.get("date")
        if date is None:
            date = row.get("date_utc")

        return cls(
            slug=slug,
            title=_required_str(row.get("title")),
            date=_required_str(date),
            timezone=_required_str(row.get("timezone")),
            author=_required_str(row.get("author")),
            content=_required_str(row.get("content")),
            path=_optional_str(row.get("path")),
            excerpt=_optional_str(row.get("excerpt")),
            tags=parse_tags(row.get("tags")),
            thumbnail=_optional_str(row.get("thumbnail")),
            width=_optional_str(row.get("width")),
        )

    def to_meta(self) -> DocMeta:
        return DocMeta(
            slug=self.slug,
            title=self.title,
            date=self.date,
            timezone=self.timezone,
            author=self.author,
            path=self.path,
            excerpt=self.excerpt,
            tags=self.tags,
            thumbnail=self.thumbnail,
            width=self.width,
        )


@dataclass(frozen=True, slots=True)
class Document:
    """Builder-time view of a tokenized post."""

    meta: DocMeta
    tf: Counter[str]
    dl: int


@dataclass(frozen=True, slots=True)
class PostSummary:
    """Search result shape returned to clients."""

    slug: str
    title: str
    date: str
    timezone: str
    author: str
    width: str = DEFAULT_WIDTH
    path: str | None = None
    excerpt: str | None = None
    tags: tuple[str, ...] | None = None
    thumbnail: str | None = None
    content: str = ""

    @classmethod
    def from_meta(cls, meta: DocMeta) -> PostSummary:
        return cls(
            slug=meta.slug,
            title=meta.title,
            date=meta.date,
            timezone=meta.timezone,
            author=meta.author,
            width=meta.width or DEFAULT_WIDTH,
            path=meta.path,
            excerpt=meta.excerpt,
            tags=meta.tags or None,
            thumbnail=meta.thumbnail,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.path is not None:
            data["path"] = self.path
        data["slug"] = self.slug
        data["title"] = self.title
        data["date"] = self.date
        data["timezone"] = self.timezone
        if self.excerpt is not None:
            data["excerpt"] = self.excerpt
        data["content"] = ""
        if self.tags:
            data["tags"] = list(self.tags)
        data["author"] = self.author
        if self.thumbnail is not None:
            data["thumbnail"] = self.thumbnail
        data["width"] = self.width
        return data


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _pairs(values: Any, *, what: str) -> list[int]:
    if not isinstance(values, list):
        raise ArtifactFormatError(f"{what} must be an array")
    if len(values) % 2:
        raise ArtifactFormatError(f"{what} must hold an even number of entries")
    if not all(_is_count(value) for value in values):
        raise ArtifactFormatError(f"{what} must hold non-negative integers")
    return values


def _require(data: Mapping[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    value = data.get(key)
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ArtifactFormatError(f"Artifact field {key!r} is missing or malformed")
    return value


@dataclass(frozen=True, slots=True)
class LegacyEntry:
    """Legacy artifact item: document metadata plus a lowercase haystack."""

    meta: DocMeta
    haystack: str

    def to_dict(self) -> dict[str, Any]:
        return {**self.meta.to_dict(), "h": self.haystack}


@dataclass(frozen=True, slots=True)
class LegacyIndex:
    """Bare-array artifact searched by substring containment."""

    kind: ClassVar[str] = "legacy"

    entries: tuple[LegacyEntry, ...] = ()

    @property
    def doc_count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]

    @classmethod
    def from_list(cls, data: Sequence[Any]) -> LegacyIndex:
        entries = []
        for item in data:
            meta = DocMeta.from_dict(item)
            haystack = item.get("h")
            entries.append(LegacyEntry(meta=meta, haystack=haystack.lower() if isinstance(haystack, str) else ""))
        return cls(entries=tuple(entries))


@dataclass(frozen=True, slots=True)
class PackedDocument:
    """Per-document entry of a ranked artifact.

    ``terms`` holds the flat ``[token_id, freq, ...]`` forward pairs and is only
    populated for v2 artifacts.
    """

    meta: DocMeta
    dl: int
    terms: list[int] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"m": self.meta.to_dict(), "dl": self.dl}
        if self.terms is not None:
            data["t"] = self.terms
        return data

    @classmethod
    def from_dict(cls, data: Any, *, with_terms: bool) -> PackedDocument:
        if not isinstance(data, Mapping):
            raise ArtifactFormatError("Artifact document must be an object")
        dl = data.get("dl", 0)
        if not isinstance(dl, (int, float)) or isinstance(dl, bool):
            raise ArtifactFormatError("Artifact document length must be numeric")
        terms = _pairs(data.get("t"), what="Document forward list") if with_terms else None
        return cls(meta=DocMeta.from_dict(data.get("m")), dl=int(dl), terms=terms)


@dataclass(frozen=True, slots=True)
class _RankedIndex:
    total_docs: int
    avdl: float
    df: list[int]
    vocab: dict[str, int]
    docs: tuple[PackedDocument, ...] = field(default_factory=tuple)

    @property
    def doc_count(self) -> int:
        return len(self.docs)

    def _header(self, version: int) -> dict[str, Any]:
        return {"v": version, "N": self.total_docs, "avdl": self.avdl, "df": self.df, "vocab": self.vocab}

    @staticmethod
    def _parse_header(data: Mapping[str, Any]) -> dict[str, Any]:
        total_docs = _require(data, "N", (int, float))
        avdl = _require(data, "avdl", (int, float))
        df = _require(data, "df", list)
        vocab = _require(data, "vocab", dict)
        if not all(_is_count(count) for count in df):
            raise ArtifactFormatError("Artifact field 'df' must hold non-negative integers")
        for token, token_id in vocab.items():
            if not _is_count(token_id) or token_id >= len(df):
                raise ArtifactFormatError(f"Vocabulary id for {token!r} is out of range")
        return {"total_docs": max(int(total_docs), 1), "avdl": float(avdl), "df": df, "vocab": vocab}


@dataclass(frozen=True, slots=True)
class ForwardIndex(_RankedIndex):
    """v2 artifact: per-document forward lists of ``[token_id, freq]`` pairs."""

    kind: ClassVar[str] = "v2"
    version: ClassVar[int] = 2

    def to_dict(self) -> dict[str, Any]:
        return {**self._header(self.version), "docs": [doc.to_dict() for doc in self.docs]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ForwardIndex:
        header = cls._parse_header(data)
        docs = tuple(PackedDocument.from_dict(doc, with_terms=True) for doc in _require(data, "docs", list))
        vocab_size = len(header["df"])
        for doc in docs:
            if any(token_id >= vocab_size for token_id in doc.terms[0::2]):
                raise ArtifactFormatError(f"Forward list of {doc.meta.slug!r} references an unknown token id")
        return cls(docs=docs, **header)


@dataclass(frozen=True, slots=True)
class InvertedIndex(_RankedIndex):
    """v3 artifact: postings of ``[doc_id, freq]`` pairs per token id."""

    kind: ClassVar[str] = "v3"
    version: ClassVar[int] = 3

    postings: list[list[int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self._header(self.version),
            "postings": self.postings,
            "docs": [doc.to_dict() for doc in self.docs],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InvertedIndex:
        header = cls._parse_header(data)
        docs = tuple(PackedDocument.from_dict(doc, with_terms=False) for doc in _require(data, "docs", list))
        postings = _require(data, "postings", list)
        if len(postings) > len(header["df"]):
            raise ArtifactFormatError("Postings reference token ids beyond the document frequency table")
        for token_id, plist in enumerate(postings):
            pairs = _pairs(plist, what=f"Postings list {token_id}")
            if any(not 0 <= doc_id < len(docs) for doc_id in pairs[0::2]):
                raise ArtifactFormatError(f"Postings list {token_id} references an unknown document")
        return cls(docs=docs, postings=postings, **header)


Artifact = LegacyIndex | ForwardIndex | InvertedIndex


def parse_artifact(payload: Any) -> Artifact:
    """Return the artifact variant matching ``payload``'s shape."""

    if isinstance(payload, list):
        return LegacyIndex.from_list(payload)
    if isinstance(payload, Mapping):
        version = payload.get("v")
        if version == ForwardIndex.version:
            return ForwardIndex.from_dict(payload)
        if version == InvertedIndex.version:
            return InvertedIndex.from_dict(payload)
        raise ArtifactFormatError(f"Unsupported artifact version {version!r}")
    raise ArtifactFormatError(f"Unsupported artifact payload of type {type(payload).__name__}")
