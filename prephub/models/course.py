"""
Pydantic Models for the Course API

Request payloads are validated here before they reach the repositories;
response models document the JSON shapes returned by the routers.
"""

from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, StrictBool

CourseListFilter = Literal["all", "my-courses", "bookmarked", "enrolled"]
CourseListSort = Literal["recent", "popular", "oldest"]


class ChapterOutline(BaseModel):
    """Chapter entry of a course outline"""
    title: str = Field(..., min_length=1, max_length=200, description="Chapter title")
    description: str = Field("", description="Short summary of the chapter")
    order_index: Optional[int] = Field(
        None, ge=1, description="Learning order (defaults to list position)"
    )


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1, max_length=200)
    chapters: List[ChapterOutline] = Field(..., min_length=1)
    isPublic: bool = True


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    topic: Optional[str] = Field(None, max_length=200)
    isPublic: Optional[bool] = None


class OutlineRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=200)


class ChapterProgressUpdate(BaseModel):
    isCompleted: StrictBool


class EnrollmentOut(BaseModel):
    id: int
    courseId: int
    userId: str
    enrolledAt: str
    isCompleted: bool
    completedAt: Optional[str]
    progressPercentage: int = Field(..., ge=0, le=100)
    lastAccessedAt: str


class EnrollmentResponse(BaseModel):
    message: str
    enrollment: EnrollmentOut


class ChapterProgressOut(BaseModel):
    isCompleted: bool
    completedAt: Optional[str]
    progressPercentage: int = Field(..., ge=0, le=100)
    enrollment: EnrollmentOut


class ProgressResponse(BaseModel):
    message: str
    progress: ChapterProgressOut


class BookmarkResponse(BaseModel):
    message: str
    bookmarked: bool


class MessageResponse(BaseModel):
    message: str


class HealthCheckResponse(BaseModel):
    """Health Check Response Model"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    environment: str = Field(..., description="Deployment environment")
    timestamp: datetime = Field(..., description="Check timestamp")
    uptime: float = Field(..., description="Seconds since process start")
