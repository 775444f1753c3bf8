"""
Result and input shapes for the data store.

Rows never leave the store as raw driver records; each fetch is validated
into one of these models.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
    id: int
    username: str
    avatar_url: str | None = None
    name: str | None = None
    email: str | None = None
    location: str | None = None
    bio: str = ""
    role: str = "user"


class UserLookup(BaseModel):
    user: User | None = None
    is_found: bool


class UserProfile(BaseModel):
    name: str | None = None
    email: str | None = None
    location: str | None = None
    # Stored as '' when omitted.
    bio: str | None = None


class NewQuestion(BaseModel):
    title: str = Field(..., min_length=1)
    body: str
    body_text: str
    tags: list[str] = Field(default_factory=list)


class QuestionSummary(BaseModel):
    id: int
    title: str
    body_text: str
    owner_id: int
    owner_name: str
    owner_avatar: str | None = None
    created_at: datetime
    last_modified: datetime
    vote_count: int = 0
    answer_count: int = 0
    has_accepted_answer: bool = False


class QuestionDetail(QuestionSummary):
    body: str


class Tag(BaseModel):
    id: int
    tag_name: str


class Answer(BaseModel):
    id: int
    body: str
    body_text: str
    question_id: int
    owner_id: int
    owner_name: str
    owner_avatar: str | None = None
    is_accepted: bool = False
    created_at: datetime
    last_modified: datetime
    vote_count: int = 0


class VoteStatus(BaseModel):
    is_voted: bool
    vote_type: int | None = None


class VoteTally(BaseModel):
    count: int = 0
    upvotes: int = 0
    downvotes: int = 0


class NewComment(BaseModel):
    body: str = Field(..., min_length=1)
    owner_id: int
    # Question id or answer id, depending on the comment space.
    subject_id: int
    creation_time: datetime


class Comment(BaseModel):
    id: int
    body: str
    owner_id: int
    owner_name: str
    owner_avatar: str | None = None
    subject_id: int
    created_at: datetime
    last_modified: datetime


class SearchResponse(BaseModel):
    query: str
    questions: list[QuestionSummary]
    tags: list[str]


class PopularTagsResponse(BaseModel):
    query: str
    tags: list[str]
