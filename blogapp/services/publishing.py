"""
Write side of the catalog.

``PublishingService`` validates input, keeps slugs unique, enforces the
author/category/comment reference rules and turns storage failures into
the error kinds from ``blogapp.errors``. Each public method runs in one
transaction: it either commits completely or rolls back and raises.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blogapp.errors import (
    CatalogError,
    ConflictError,
    DependencyError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from blogapp.models.author import Author
from blogapp.models.category import Category
from blogapp.models.comment import Comment
from blogapp.models.post import Post
from blogapp.schemas import AuthorInput, CategoryInput, CommentInput, PostInput, parse_input
from blogapp.services.moderation import ModerationFilter
from blogapp.services.slugs import SlugResolver
from blogapp.services.uploads import UploadStore
from blogapp.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    content: bytes
    filename: str


class PublishingService:
    def __init__(self, db: Session, moderation: ModerationFilter, uploads: Optional[UploadStore] = None):
        self.db = db
        self.moderation = moderation
        self.uploads = uploads
        self.slugs = SlugResolver(db)

    # --- Posts ---

    def create_post(self, data: Any, image: Optional[ImageUpload] = None) -> Post:
        post_in = parse_input(PostInput, data)

        with self._transaction("create post") as details:
            self._require_author_and_category(post_in.author_id, post_in.category_id)
            slug = self._pick_slug(post_in.title, post_in.slug)

            featured_image = post_in.featured_image
            if image is not None:
                featured_image = self._store_image(image)
                details["image_reference"] = featured_image

            post = Post(
                title=post_in.title,
                body=post_in.body,
                slug=slug,
                featured_image=featured_image,
                meta_title=post_in.meta_title,
                meta_description=post_in.meta_description,
                meta_keywords=post_in.meta_keywords,
                view_count=0,
                published_at=post_in.published_at or utcnow(),
                author_id=post_in.author_id,
                category_id=post_in.category_id,
            )
            self.db.add(post)

        self.db.refresh(post)
        logger.info("Created post %s with slug %r", post.id, post.slug)
        return post

    def update_post(self, post_id: int, data: Any, image: Optional[ImageUpload] = None) -> Post:
        """
        Replace a post's editable fields.

        ``published_at`` and ``view_count`` keep their stored values; a publish
        date in ``data`` is ignored. Without a new ``image`` the current
        featured image is kept.
        """
        post_in = parse_input(PostInput, data)

        with self._transaction("update post", post_id=post_id) as details:
            post = self.db.get(Post, post_id)
            if post is None:
                raise NotFoundError("Blog post not found.", {"post_id": post_id})

            self._require_author_and_category(post_in.author_id, post_in.category_id)
            post.slug = self._pick_slug(post_in.title, post_in.slug, exclude_post_id=post.id)

            # No new upload keeps the current image
            if image is not None:
                post.featured_image = self._store_image(image)
                details["image_reference"] = post.featured_image
            elif post_in.featured_image:
                post.featured_image = post_in.featured_image

            post.title = post_in.title
            post.body = post_in.body
            post.meta_title = post_in.meta_title
            post.meta_description = post_in.meta_description
            post.meta_keywords = post_in.meta_keywords
            post.author_id = post_in.author_id
            post.category_id = post_in.category_id
            post.modified_at = utcnow()

        self.db.refresh(post)
        logger.info("Updated post %s", post.id)
        return post

    def delete_post(self, post_id: int, missing_ok: bool = True) -> bool:
        """
        Delete a post together with its comments.

        Returns False without touching the store when the post is already
        gone, unless ``missing_ok`` is False, in which case NotFoundError is
        raised instead.
        """
        with self._transaction("delete post", post_id=post_id):
            post = self.db.get(Post, post_id)
            if post is None:
                if missing_ok:
                    logger.info("Delete of missing post %s ignored", post_id)
                    return False
                raise NotFoundError("Blog post not found.", {"post_id": post_id})

            removed = (
                self.db.query(Comment)
                .filter(Comment.post_id == post.id)
                .delete(synchronize_session=False)
            )
            self.db.delete(post)

        logger.info("Deleted post %s and %d comment(s)", post_id, removed)
        return True

    # --- Comments ---

    def create_comment(self, post_id: int, data: Any) -> Comment:
        comment_in = parse_input(CommentInput, data)

        with self._transaction("create comment", missing_reference=NotFoundError, post_id=post_id):
            if self.db.get(Post, post_id) is None:
                raise NotFoundError("Blog Post Not Found", {"post_id": post_id})

            result = self.moderation.check(comment_in.body)
            if not result.accepted:
                raise ValidationError(
                    f"The comment contains a prohibited word: {result.term}",
                    {"field": "body", "term": result.term},
                )

            comment = Comment(
                post_id=post_id,
                author_name=comment_in.author_name,
                author_email=comment_in.author_email,
                body=comment_in.body,
                posted_at=utcnow(),
            )
            self.db.add(comment)

        self.db.refresh(comment)
        logger.info("Added comment %s to post %s", comment.id, post_id)
        return comment

    # --- Authors and categories ---

    def create_author(self, data: Any) -> Author:
        author_in = parse_input(AuthorInput, data)
        with self._transaction("create author"):
            author = Author(name=author_in.name, email=author_in.email)
            self.db.add(author)
        self.db.refresh(author)
        return author

    def create_category(self, data: Any) -> Category:
        category_in = parse_input(CategoryInput, data)
        with self._transaction("create category"):
            category = Category(name=category_in.name)
            self.db.add(category)
        self.db.refresh(category)
        return category

    def delete_author(self, author_id: int) -> None:
        self._delete_unreferenced(Author, Post.author_id, author_id)

    def delete_category(self, category_id: int) -> None:
        self._delete_unreferenced(Category, Post.category_id, category_id)

    # --- Helpers ---

    def _delete_unreferenced(self, model: Type, reference_column, entity_id: int) -> None:
        label = model.__name__
        with self._transaction(f"delete {label.lower()}", id=entity_id):
            entity = self.db.get(model, entity_id)
            if entity is None:
                raise NotFoundError(f"{label} not found", {"id": entity_id})

            post_count = self.db.query(Post).filter(reference_column == entity_id).count()
            if post_count:
                raise DependencyError(
                    f"{label} is still referenced by {post_count} post(s)",
                    {"id": entity_id, "post_count": post_count},
                )
            self.db.delete(entity)

        logger.info("Deleted %s %s", label.lower(), entity_id)

    def _require_author_and_category(self, author_id: int, category_id: int) -> None:
        if self.db.get(Author, author_id) is None:
            raise DependencyError("Author does not exist", {"author_id": author_id})
        if self.db.get(Category, category_id) is None:
            raise DependencyError("Category does not exist", {"category_id": category_id})

    def _pick_slug(self, title: str, provided_slug: Optional[str], exclude_post_id: Optional[int] = None) -> str:
        # A caller-chosen slug is never rewritten, only checked
        if provided_slug:
            if self.slugs.is_taken(provided_slug, exclude_post_id):
                raise ConflictError("The slug must be unique.", {"slug": provided_slug})
            return provided_slug
        return self.slugs.resolve_slug(title, exclude_post_id=exclude_post_id)

    def _store_image(self, image: ImageUpload) -> str:
        if self.uploads is None:
            raise StorageError("No upload store configured")
        return self.uploads.store(image.content, image.filename)

    @contextmanager
    def _transaction(
        self,
        action: str,
        missing_reference: Type[CatalogError] = DependencyError,
        **context: Any,
    ) -> Iterator[Dict[str, Any]]:
        details: Dict[str, Any] = dict(context)
        try:
            yield details
            self.db.commit()
        except CatalogError as e:
            self.db.rollback()
            for key, value in details.items():
                e.details.setdefault(key, value)
            raise
        except IntegrityError as e:
            self.db.rollback()
            error = _translate_integrity_error(e, action, details, missing_reference)
            logger.warning("%s rejected by the store: %s", action, error.message)
            raise error from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Storage failure during %s", action)
            raise StorageError(f"Failed to {action}", details) from e


def _translate_integrity_error(
    error: IntegrityError,
    action: str,
    details: Dict[str, Any],
    missing_reference: Type[CatalogError],
) -> CatalogError:
    message = str(error.orig).lower()
    if "unique" in message or "duplicate" in message:
        return ConflictError("The slug must be unique.", details)
    if "foreign key" in message:
        return missing_reference(f"Cannot {action}: referenced record is missing or still in use", details)
    return ValidationError(f"Cannot {action}: {error.orig}", details)
