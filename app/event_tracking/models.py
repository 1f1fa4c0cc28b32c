"""
Data Models for Event Tracking

Defines the data structures used by the event tracking system. Incoming
payloads are validated and defaulted once, at the deserialization boundary;
everything past ``EventPayload`` works with typed values.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UtmParams(BaseModel):
    """Campaign attribution captured from ``utm_*`` query parameters."""
    model_config = ConfigDict(extra="ignore")

    source: Optional[str] = None
    medium: Optional[str] = None
    campaign: Optional[str] = None
    term: Optional[str] = None
    content: Optional[str] = None


class EventPayload(BaseModel):
    """Payload structure for incoming events from the frontend."""
    model_config = ConfigDict(extra="ignore")

    type: str = Field(default="pageview", description="pageview, event or heartbeat")
    ts: Optional[str] = Field(default=None, description="Client timestamp, ISO 8601")
    path: str = "/"
    referrer: str = ""
    ua: Optional[str] = Field(default=None, description="User agent, request header if absent")
    lang: str = ""
    screen: str = ""
    dpr: Union[int, float] = 1
    uuid: Optional[str] = None
    tz: Optional[str] = None
    dnt: bool = False
    device: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    utm: Optional[UtmParams] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Treat explicit nulls like missing fields so defaults apply."""
        if isinstance(values, dict):
            return {k: v for k, v in values.items() if v is not None}
        return values

    def utm_dict(self) -> Optional[Dict[str, str]]:
        """Get the non-empty UTM values, or None when there are none."""
        if self.utm is None:
            return None
        values = {k: v for k, v in self.utm.model_dump().items() if v}
        return values or None


@dataclass
class Event:
    """Internal event structure for storage, one line of the daily log."""

    ts: str
    type: str
    path: str = "/"
    referrer: str = ""
    ua: str = ""
    lang: str = ""
    screen: str = ""
    dpr: Union[int, float] = 1
    uuid: Optional[str] = None
    tz: Optional[str] = None
    device: Optional[str] = None
    utm: Optional[Dict[str, str]] = None
    ip: str = ""
    country: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        record = {
            "ts": self.ts,
            "type": self.type,
            "path": self.path,
            "referrer": self.referrer,
            "ua": self.ua,
            "lang": self.lang,
            "screen": self.screen,
            "dpr": self.dpr,
            "uuid": self.uuid,
            "tz": self.tz,
            "device": self.device,
            "utm": self.utm,
            "ip": self.ip,
            "country": self.country,
        }
        if self.data is not None:
            record["data"] = self.data
        return record


@dataclass
class TrackResult:
    """Outcome of one ingestion request."""

    success: bool
    skipped: bool = False
    message: Optional[str] = None
    status_code: int = 200

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the response body."""
        body: Dict[str, Any] = {"success": self.success}
        if self.skipped:
            body["skipped"] = True
        if self.message:
            body["message"] = self.message
        return body
