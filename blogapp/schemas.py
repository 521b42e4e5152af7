from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from blogapp.errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value


class AuthorInput(BaseModel):
    name: str = Field(max_length=100)
    email: EmailStr

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _not_blank(value)


class CategoryInput(BaseModel):
    name: str = Field(max_length=100)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _not_blank(value)


class PostInput(BaseModel):
    title: str = Field(max_length=200)
    body: str
    slug: Optional[str] = Field(default=None, max_length=200)
    featured_image: Optional[str] = Field(default=None, max_length=500)
    meta_title: Optional[str] = Field(default=None, max_length=150)
    meta_description: Optional[str] = Field(default=None, max_length=300)
    meta_keywords: Optional[str] = Field(default=None, max_length=250)
    published_at: Optional[datetime] = None
    author_id: int
    category_id: int

    @field_validator("title", "body")
    @classmethod
    def check_required_text(cls, value: str) -> str:
        return _not_blank(value)


class CommentInput(BaseModel):
    author_name: str = Field(max_length=100)
    author_email: EmailStr
    body: str = Field(max_length=1000)

    @field_validator("author_name", "body")
    @classmethod
    def check_required_text(cls, value: str) -> str:
        return _not_blank(value)


class AuthorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: Optional[str] = None
    body: str
    featured_image: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    view_count: int
    published_at: datetime
    modified_at: Optional[datetime] = None
    author_id: int
    category_id: int


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    author_name: str
    author_email: str
    body: str
    posted_at: datetime


class PostPageResponse(BaseModel):
    items: List[PostResponse]
    current_page: int
    total_pages: int
    total_items: int


class CategoryPageResponse(PostPageResponse):
    category_id: int
    category_name: str


class PostDetailResponse(BaseModel):
    post: PostResponse
    author: AuthorResponse
    category: CategoryResponse
    comments: List[CommentResponse]


def parse_input(schema: Type[SchemaT], data: Any) -> SchemaT:
    """Coerce a mapping (or an already built model) into ``schema``."""
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        errors = format_errors(exc.errors())
        raise ValidationError(f"Invalid {schema.__name__} data", {"errors": errors}) from exc


def format_errors(errors: List[dict]) -> List[dict]:
    """Flatten pydantic error entries into field/message pairs."""
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in errors
    ]
