"""
Data models for the blog subsystem.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AUTHOR = "Admin"


def _split_tags(value):
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


class BlogPostCreateRequest(BaseModel):
    """Body of a create-post request."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: str
    year: Optional[str] = None
    category: str = ""
    excerpt: str = ""
    content: str = ""
    featured_image: str = ""
    author: str = DEFAULT_AUTHOR
    published: bool = False
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, value):
        return [] if value is None else _split_tags(value)


class BlogPostUpdateRequest(BaseModel):
    """Body of an update-post request; only provided fields are applied."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    title: Optional[str] = None
    year: Optional[str] = None
    category: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
    author: Optional[str] = None
    published: Optional[bool] = None
    tags: Optional[Union[List[str], str]] = None

    @field_validator("tags", mode="after")
    @classmethod
    def _tags_list(cls, value):
        return _split_tags(value)

    def changes(self) -> Dict[str, Any]:
        """Fields the caller actually sent, without the id."""
        return self.model_dump(exclude={"id"}, exclude_none=True)


@dataclass
class BlogPost:
    """One blog post folder as presented to clients."""

    id: str
    title: str
    slug: str
    year: str
    created: str
    modified: str
    category: str = ""
    excerpt: str = ""
    content: str = ""
    featured_image: str = ""
    author: str = DEFAULT_AUTHOR
    published: bool = False
    tags: List[Any] = field(default_factory=list)
    images: List[str] = field(default_factory=list)

    @classmethod
    def from_meta(cls, year: str, slug: str, meta: Dict[str, Any], images: Optional[List[str]] = None) -> "BlogPost":
        """Build a post from its meta.json; the folder decides year and slug."""
        created = meta.get("created") or ""
        return cls(
            id=str(meta["id"]),
            title=meta.get("title", ""),
            slug=slug,
            year=year,
            created=created,
            modified=meta.get("modified") or created,
            category=meta.get("category", ""),
            excerpt=meta.get("excerpt", ""),
            content=meta.get("content", ""),
            featured_image=meta.get("featured_image", ""),
            author=meta.get("author", DEFAULT_AUTHOR),
            published=meta.get("published", False),
            tags=meta.get("tags", []),
            images=images or []
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
