"""
Read side of the catalog: filtered, ordered, paginated post listings and
the lookups the web layer needs around them.

Listings are ordered by publish date, newest first, with ties kept in
insertion order. Out-of-range page numbers are clamped to the nearest
valid page instead of raising.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Query, Session

from blogapp.errors import NotFoundError, ValidationError
from blogapp.models.author import Author
from blogapp.models.category import Category
from blogapp.models.comment import Comment
from blogapp.models.post import Post
from blogapp.services.views import record_view

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostFilter:
    title_contains: Optional[str] = None
    category_id: Optional[int] = None


@dataclass
class PostPage:
    items: List[Post] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0


@dataclass
class CategoryPage(PostPage):
    category_id: int = 0
    category_name: str = ""


@dataclass
class PostDetail:
    post: Post
    author: Author
    category: Category
    comments: List[Comment]


def count_pages(total_items: int, page_size: int) -> int:
    """Number of pages for ``total_items``; never less than one."""
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: Optional[int], total_pages: int) -> int:
    if page is None or page < 1:
        return 1
    return min(page, total_pages)


def _apply_filters(query: Query, filters: PostFilter) -> Query:
    if filters.title_contains:
        query = query.filter(Post.title.icontains(filters.title_contains, autoescape=True))
    if filters.category_id:
        query = query.filter(Post.category_id == filters.category_id)
    return query


def _paginate(query: Query, page: Optional[int], page_size: int) -> PostPage:
    if page_size is None or page_size < 1:
        raise ValidationError("page_size must be a positive integer", {"page_size": page_size})

    total_items = query.count()
    total_pages = count_pages(total_items, page_size)
    current_page = clamp_page(page, total_pages)
    if page != current_page:
        logger.debug("Requested page %s clamped to %s of %s", page, current_page, total_pages)

    items = (
        query.order_by(Post.published_at.desc(), Post.id.asc())
        .offset((current_page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return PostPage(items=items, current_page=current_page, total_pages=total_pages, total_items=total_items)


def list_posts(db: Session, filters: Optional[PostFilter] = None, page: Optional[int] = 1, page_size: int = 10) -> PostPage:
    query = _apply_filters(db.query(Post), filters or PostFilter())
    return _paginate(query, page, page_size)


def list_posts_by_category(db: Session, category_id: int, page: Optional[int] = 1, page_size: int = 10) -> CategoryPage:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Invalid Category", {"category_id": category_id})

    query = db.query(Post).filter(Post.category_id == category.id)
    result = _paginate(query, page, page_size)
    return CategoryPage(
        items=result.items,
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_items=result.total_items,
        category_id=category.id,
        category_name=category.name,
    )


def get_post(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Blog post not found", {"post_id": post_id})
    return post


def get_post_by_slug(db: Session, slug: str) -> Post:
    if not slug:
        raise ValidationError("Slug not provided.")
    post = db.query(Post).filter(Post.slug == slug).first()
    if post is None:
        raise NotFoundError("Blog post not found", {"slug": slug})
    return post


def list_comments(db: Session, post_id: int) -> List[Comment]:
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.posted_at.desc(), Comment.id.desc())
        .all()
    )


def get_post_detail(db: Session, slug: str) -> PostDetail:
    """Reader-facing fetch by slug. Counts one view per successful call."""
    post = get_post_by_slug(db, slug)
    record_view(db, post.id)
    db.refresh(post)

    return PostDetail(
        post=post,
        author=db.get(Author, post.author_id),
        category=db.get(Category, post.category_id),
        comments=list_comments(db, post.id),
    )


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name, Category.id).all()


def list_authors(db: Session) -> List[Author]:
    return db.query(Author).order_by(Author.name, Author.id).all()
