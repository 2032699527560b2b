"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shortlinks.store.models import ClickEvent, UrlRecord


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortUrlRequest(BaseModel):
    """Request to shorten a URL.

    Fields are left untyped so the request validator can report every
    problem (wrong types included) in one error list.
    """

    url: Any = Field(None, description="The absolute URL to shorten")
    validity: Any = Field(None, description="Minutes the shortlink stays valid (default 30)")
    shortcode: Any = Field(None, description="Optional custom shortcode, 3-20 alphanumeric characters")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "validity": 30,
                },
                {
                    "url": "https://github.com/user/repo",
                    "validity": 1440,
                    "shortcode": "myrepo",
                }
            ]
        }
    }


class ShortUrlResponse(BaseModel):
    """Response after shortening a URL."""

    shortlink: str = Field(..., description="The complete short URL")
    expiry: datetime = Field(..., description="Expiry timestamp")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shortlink": "http://localhost:5000/abc123",
                    "expiry": "2024-01-01T12:30:00Z"
                }
            ]
        }
    }


class ClickResponse(CamelModel):
    """One recorded redirect."""

    timestamp: datetime
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    location: str

    @classmethod
    def from_event(cls, event: ClickEvent) -> "ClickResponse":
        return cls(
            timestamp=event.timestamp,
            referrer=event.referrer,
            user_agent=event.user_agent,
            location=event.location,
        )


class ShortUrlStatsResponse(CamelModel):
    """Short URL with its click ledger."""

    shortcode: str
    original_url: str
    shortlink: str
    created_at: datetime
    expiry: datetime
    click_count: int
    clicks: List[ClickResponse]

    @classmethod
    def from_record(cls, record: UrlRecord, shortlink: str) -> "ShortUrlStatsResponse":
        # One snapshot so click_count and clicks always agree
        clicks = record.clicks
        return cls(
            shortcode=record.shortcode,
            original_url=record.original_url,
            shortlink=shortlink,
            created_at=record.created_at,
            expiry=record.expires_at,
            click_count=len(clicks),
            clicks=[ClickResponse.from_event(click) for click in clicks],
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    records: int = Field(..., description="Records currently tracked by the store")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error summary")
    message: Optional[str] = Field(None, description="Detailed error information")
    details: Optional[List[str]] = Field(None, description="Validation errors")
