from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional
from datetime import datetime

Verdict = Literal["safe", "phishing", "suspicious"]
ScanType = Literal["url", "screenshot"]


class CamelModel(BaseModel):
    """Base for records exchanged as camelCase JSON (``scanId``, ``createdAt``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(CamelModel):
    username: str
    password: str


class User(UserCreate):
    id: int


class AnalysisResult(BaseModel):
    """Output shared by every scorer."""

    verdict: Verdict
    confidence: int = Field(ge=0, le=100)
    details: List[str]


class ScanCreate(CamelModel):
    type: ScanType
    target: str
    verdict: Verdict
    confidence: int = Field(ge=0, le=100)
    details: Optional[List[str]] = None


class Scan(ScanCreate):
    id: int
    created_at: datetime


class FeedbackCreate(CamelModel):
    scan_id: int
    is_correct: bool
    comment: Optional[str] = None


class FeedbackRequest(BaseModel):
    """
    Body of a feedback submission. Only the camelCase keys are accepted and
    values are not coerced, so "1" is not a scan id and "yes" is not a bool.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=False)

    scan_id: StrictInt
    is_correct: StrictBool
    comment: Optional[StrictStr] = None


class Feedback(FeedbackCreate):
    id: int
    created_at: datetime


class Stats(CamelModel):
    total_scans: int
    safe_count: int
    phishing_count: int
    suspicious_count: int


class URLAnalyzeRequest(BaseModel):
    url: str = Field(min_length=1)


class AnalysisResponse(CamelModel):
    scan_id: int
    verdict: Verdict
    confidence: int
    details: List[str]
    analysis_time: float
