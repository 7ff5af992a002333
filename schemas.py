"""
Database Schemas for Mangrove Watch

Each Pydantic model describes a MongoDB collection.
Report -> "reports", LeaderboardEntry -> "leaderboards" (keyed by userId).
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ReportStatus = Literal['pending', 'verified', 'rejected']
IncidentType = Literal['cutting', 'dumping', 'other']


class ReportCreate(BaseModel):
    type: IncidentType = Field('cutting', description="Kind of incident")
    description: str = Field('', description="What the reporter saw")
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    severity: int = Field(3, ge=1, le=5, description="1 (minor) to 5 (severe)")
    photoPath: Optional[str] = Field(None, description="Blob store path of the uploaded photo")


class Report(ReportCreate):
    id: Optional[str] = Field(None, description="Document id")
    userId: str = Field(..., description="Reporting user")
    status: ReportStatus = Field('pending')
    createdAt: Optional[datetime] = Field(None)


class ReportTally(BaseModel):
    """The two fields of a report the leaderboard job reads."""
    id: str
    userId: str
    status: str

    @classmethod
    def from_document(cls, doc: dict) -> "ReportTally":
        return cls(id=str(doc["_id"]), userId=str(doc["userId"]), status=str(doc.get("status", "")))


class LeaderboardEntry(BaseModel):
    userId: str = Field(..., description="Document key in the leaderboards collection")
    points: int = Field(0, ge=0)
    lastUpdated: Optional[datetime] = Field(None)

    @classmethod
    def from_document(cls, doc: dict) -> "LeaderboardEntry":
        # other writers may leave points missing, null or negative
        try:
            points = max(0, int(doc.get("points") or 0))
        except (TypeError, ValueError):
            points = 0
        last_updated = doc.get("lastUpdated")
        if not isinstance(last_updated, datetime):
            last_updated = None
        return cls(userId=str(doc["_id"]), points=points, lastUpdated=last_updated)
