import re
from typing import Optional

from sqlalchemy.orm import Session

from blogapp.errors import ValidationError
from blogapp.models.post import Post

_WHITESPACE = re.compile(r"\s+")

MAX_SLUG_LENGTH = 200


def derive_slug(title: str) -> str:
    """
    Lower-case the title and collapse each whitespace run into one hyphen.

    Surrounding whitespace is trimmed rather than hyphenated. Punctuation is
    kept as-is: "Hello, World!" becomes "hello,-world!".
    """
    return _WHITESPACE.sub("-", title.lower().strip())


class SlugResolver:
    """
    Picks a slug for a post and makes it unique among existing posts.

    This is an advisory pre-check. Two concurrent creates may still pick the
    same slug; the unique index on posts.slug rejects the loser at commit.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_slug(self, title: str, provided_slug: Optional[str] = None, exclude_post_id: Optional[int] = None) -> str:
        candidate = provided_slug if provided_slug else derive_slug(title or "")
        if not candidate:
            raise ValidationError("Cannot derive a slug from an empty title", {"field": "title"})
        return self.ensure_unique(candidate, exclude_post_id)

    def ensure_unique(self, candidate: str, exclude_post_id: Optional[int] = None) -> str:
        unique_slug = candidate[:MAX_SLUG_LENGTH]
        counter = 1
        while self.is_taken(unique_slug, exclude_post_id):
            # Trim the base so the suffixed slug still fits the column
            suffix = f"-{counter}"
            unique_slug = f"{candidate[:MAX_SLUG_LENGTH - len(suffix)]}{suffix}"
            counter += 1
        return unique_slug

    def is_taken(self, slug: str, exclude_post_id: Optional[int] = None) -> bool:
        query = self.db.query(Post.id).filter(Post.slug == slug)
        if exclude_post_id is not None:
            query = query.filter(Post.id != exclude_post_id)
        return query.first() is not None
