"""
Database Schemas for VideoTube

Each Pydantic model maps to a MongoDB collection. The collection name is the lowercase of the class name.

Collections:
- User -> user
- Video -> video
- Comment -> comment
- Like -> like
- Tweet -> tweet
- Playlist -> playlist
- Subscription -> subscription

Request bodies accepted by the routers live at the bottom of this module.
"""

from typing import Annotated, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator, model_validator

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _Document(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


class User(_Document):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    full_name: str = Field(..., min_length=1)
    avatar: str
    cover_image: str = ""
    password_hash: str = Field(..., description="Bcrypt hash")
    watch_history: List[ObjectId] = Field(default_factory=list)


class Video(_Document):
    owner: ObjectId
    title: str = Field(..., min_length=1, max_length=120)
    description: str = ""
    video_file: str
    thumbnail: str
    duration: float = Field(0, ge=0, description="Length in seconds")
    views: int = 0
    is_published: bool = True


class Comment(_Document):
    content: str = Field(..., min_length=1)
    video: ObjectId
    owner: ObjectId


class Like(_Document):
    liked_by: ObjectId
    video: Optional[ObjectId] = None
    comment: Optional[ObjectId] = None
    tweet: Optional[ObjectId] = None


class Tweet(_Document):
    content: str = Field(..., min_length=1)
    owner: ObjectId


class Playlist(_Document):
    name: str = Field(..., min_length=1)
    description: str
    owner: ObjectId
    videos: List[ObjectId] = Field(default_factory=list)


class Subscription(_Document):
    subscriber: ObjectId = Field(..., description="The user id of the subscriber")
    channel: ObjectId = Field(..., description="The user id of the channel being subscribed to")


# -------------------- Request bodies --------------------
class RegisterRequest(BaseModel):
    full_name: NonBlankStr
    email: EmailStr
    username: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=3, max_length=30)]
    password: NonBlankStr
    avatar: NonBlankStr
    cover_image: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    password: NonBlankStr

    @field_validator("username")
    @classmethod
    def _lower_username(cls, v):
        return v.strip().lower() if v else v


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    old_password: NonBlankStr
    new_password: NonBlankStr


class UpdateAccountRequest(BaseModel):
    full_name: Optional[NonBlankStr] = None
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def _at_least_one(self):
        if self.full_name is None and self.email is None:
            raise ValueError("full_name or email is required")
        return self


class AvatarRequest(BaseModel):
    avatar: NonBlankStr


class CoverImageRequest(BaseModel):
    cover_image: NonBlankStr


class PublishVideoRequest(BaseModel):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]
    description: NonBlankStr
    video_file: NonBlankStr
    thumbnail: NonBlankStr
    duration: float = Field(0, ge=0)
    is_published: bool = True


class UpdateVideoRequest(BaseModel):
    title: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]] = None
    description: Optional[NonBlankStr] = None
    thumbnail: Optional[NonBlankStr] = None

    @model_validator(mode="after")
    def _at_least_one(self):
        if self.title is None and self.description is None and self.thumbnail is None:
            raise ValueError("title, description or thumbnail is required")
        return self


class ContentRequest(BaseModel):
    """Body shared by comments and tweets."""
    content: NonBlankStr


class PlaylistRequest(BaseModel):
    name: NonBlankStr
    description: NonBlankStr


class UpdatePlaylistRequest(BaseModel):
    name: Optional[NonBlankStr] = None
    description: Optional[NonBlankStr] = None

    @model_validator(mode="after")
    def _at_least_one(self):
        if self.name is None and self.description is None:
            raise ValueError("At least one field (name or description) is required")
        return self
