from datetime import datetime
from typing import Optional

from pydantic import Field

from courseconnect.apis.common import CamelModel


class UserProfileBase(CamelModel):
    display_name: Optional[str] = Field(None, max_length=100)

    # School
    school: Optional[str] = Field(None, max_length=200)
    major: Optional[str] = Field(None, max_length=200)
    graduation_year: Optional[str] = Field(None, max_length=10)
    gpa: Optional[str] = Field(None, max_length=10)

    # Learning preferences
    study_style: Optional[str] = Field(None, max_length=100)
    preferred_subjects: Optional[str] = Field(None, max_length=500)
    difficulty_level: Optional[str] = Field(None, max_length=50)

    bio: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=200)
    timezone: Optional[str] = Field(None, max_length=50)


class UserProfileUpdate(UserProfileBase):
    pass


class UserProfileRead(UserProfileBase):
    user_id: int
    email: Optional[str] = None
    photo_url: Optional[str] = None
    notification_settings: dict[str, bool] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # True when served from the shadow cache because the database was unreachable
    offline: bool = False


class NotificationSettings(CamelModel):
    settings: dict[str, bool]


class PhotoUploadResponse(CamelModel):
    photo_url: str
    # "store" or "data_url"
    source: str
    size: int
    attempts: int
