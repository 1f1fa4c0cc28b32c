"""
Data models for the galleries subsystem.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATEGORY = "Best of Trinax"
ACCESS_PUBLIC = "public"
ACCESS_PASSWORD = "password"

# meta.json keys that hold secrets and never leave the server
SECRET_KEYS = ("password", "passwort", "passwordHash")
IDENTITY_KEYS = ("jahr", "galerie")


class GalleryCreateRequest(BaseModel):
    """Body of a create-gallery request."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    jahr: str = Field(description="Year folder, e.g. '2024'")
    galerie: str = Field(description="Gallery folder name")
    kategorie: str = Field(default=DEFAULT_CATEGORY)
    tags: List[str] = Field(default_factory=list)
    accessType: str = Field(default=ACCESS_PUBLIC)

    @field_validator("jahr", "galerie", "kategorie", "accessType", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        return value


@dataclass
class Gallery:
    """One gallery folder as presented to clients."""

    jahr: str
    galerie: str
    kategorie: str = DEFAULT_CATEGORY
    tags: List[Any] = field(default_factory=list)
    is_video: bool = False
    upload_date: str = ""
    access_type: str = ACCESS_PUBLIC
    images: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_meta(cls, year: str, name: str, meta: Dict[str, Any], images: Optional[List[str]] = None) -> "Gallery":
        """Merge a meta.json object over the defaults; the folder decides identity."""
        known = {"kategorie", "tags", "isVideo", "uploadDate", "accessType", *IDENTITY_KEYS, *SECRET_KEYS}
        return cls(
            jahr=year,
            galerie=name,
            kategorie=meta.get("kategorie", DEFAULT_CATEGORY),
            tags=meta.get("tags", []),
            is_video=meta.get("isVideo", False),
            upload_date=meta.get("uploadDate", ""),
            access_type=meta.get("accessType", ACCESS_PUBLIC),
            images=images or [],
            extra={k: v for k, v in meta.items() if k not in known}
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = dict(self.extra)
        data.update({
            "jahr": self.jahr,
            "galerie": self.galerie,
            "kategorie": self.kategorie,
            "tags": self.tags,
            "isVideo": self.is_video,
            "uploadDate": self.upload_date,
            "accessType": self.access_type,
            "images": self.images,
            "mediaCount": len(self.images)
        })
        return data
