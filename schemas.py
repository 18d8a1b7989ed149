"""
Request and response schemas for the JSON API.

Each request body is validated at the route boundary with ``parse_body``;
anything that does not fit the model is rejected with a 400.
"""
from typing import List, Optional, Union

from flask import request
from pydantic import BaseModel, Field, ValidationError, field_validator

from errors import BadRequest


def _strip_list(values):
    """Trim entries and drop empty or duplicate ones, keeping order."""
    seen = []
    for value in values or []:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    username: str = Field(..., min_length=1, max_length=50)

    @field_validator('email')
    @classmethod
    def email_has_at(cls, v):
        if '@' not in v:
            raise ValueError('email is not valid')
        return v.strip().lower()

    @field_validator('username')
    @classmethod
    def username_not_blank(cls, v):
        if not v.strip():
            raise ValueError('username is required')
        return v.strip()


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)

    @field_validator('tags', 'categories')
    @classmethod
    def clean_labels(cls, v):
        return _strip_list(v)


class CommentRequest(BaseModel):
    post_id: int
    content: str = Field(..., min_length=1)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class ViewRequest(BaseModel):
    userId: Optional[Union[str, int]] = None

    @field_validator('userId')
    @classmethod
    def user_id_as_text(cls, v):
        return None if v is None else str(v)


class SummarizeRequest(BaseModel):
    content: Optional[str] = None
    postId: Optional[int] = None
    maxWords: int = Field(100, ge=10, le=500)


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    history: List[ChatTurn] = Field(default_factory=list)


class ToggleResult(BaseModel):
    """Outcome of flipping an (actor, target) relation."""
    active: bool


def parse_body(model):
    """Validate the JSON body of the current request against ``model``."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise BadRequest('Request body must be a JSON object')
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        err = e.errors()[0]
        field = '.'.join(str(p) for p in err.get('loc', ()))
        msg = err.get('msg', 'Invalid value')
        raise BadRequest(f"{field}: {msg}" if field else msg)
