from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional

from blogapp.database import get_db
from blogapp.dependencies import get_page_size, get_publishing_service
from blogapp.schemas import (
    CommentInput,
    CommentResponse,
    PostDetailResponse,
    PostInput,
    PostPageResponse,
    PostResponse,
)
from blogapp.services import catalog
from blogapp.services.publishing import ImageUpload, PublishingService

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", response_model=PostPageResponse)
def list_posts(
    title: Optional[str] = None,
    category_id: Optional[int] = None,
    page: Optional[int] = None,
    page_size: int = Depends(get_page_size),
    db: Session = Depends(get_db)
):
    """List posts, newest first, filtered by title and category"""
    filters = catalog.PostFilter(title_contains=title, category_id=category_id)
    result = catalog.list_posts(db, filters, page, page_size)
    return PostPageResponse.model_validate(result, from_attributes=True)


@router.get("/{slug}", response_model=PostDetailResponse)
def get_post(slug: str, db: Session = Depends(get_db)):
    """Get a single post by slug and count the view"""
    detail = catalog.get_post_detail(db, slug)
    return PostDetailResponse.model_validate(detail, from_attributes=True)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(post: PostInput, service: PublishingService = Depends(get_publishing_service)):
    return service.create_post(post)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(post_id: int, post: PostInput, service: PublishingService = Depends(get_publishing_service)):
    """Replace a post. published_at and view_count are kept; a new publish date is ignored"""
    return service.update_post(post_id, post)


# --- Multipart Endpoints (post fields plus an optional featured image) ---

def post_form(
    title: Optional[str] = Form(None),
    body: Optional[str] = Form(None),
    slug: Optional[str] = Form(None),
    featured_image: Optional[str] = Form(None),
    meta_title: Optional[str] = Form(None),
    meta_description: Optional[str] = Form(None),
    meta_keywords: Optional[str] = Form(None),
    published_at: Optional[datetime] = Form(None),
    author_id: Optional[int] = Form(None),
    category_id: Optional[int] = Form(None)
) -> dict:
    # Left as a dict so missing fields are reported by the service
    return {
        "title": title,
        "body": body,
        "slug": slug or None,
        "featured_image": featured_image or None,
        "meta_title": meta_title,
        "meta_description": meta_description,
        "meta_keywords": meta_keywords,
        "published_at": published_at,
        "author_id": author_id,
        "category_id": category_id,
    }


def read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """An absent or empty file means no new image"""
    if image is None:
        return None
    content = image.file.read()
    if not content:
        return None
    return ImageUpload(content=content, filename=image.filename or "")


@router.post("/form", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post_form(
    data: dict = Depends(post_form),
    image: Optional[UploadFile] = File(None),
    service: PublishingService = Depends(get_publishing_service)
):
    return service.create_post(data, image=read_image(image))


@router.put("/{post_id}/form", response_model=PostResponse)
def update_post_form(
    post_id: int,
    data: dict = Depends(post_form),
    image: Optional[UploadFile] = File(None),
    service: PublishingService = Depends(get_publishing_service)
):
    """Replace a post; without a new image the current one is kept"""
    return service.update_post(post_id, data, image=read_image(image))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: int, service: PublishingService = Depends(get_publishing_service)):
    """Delete a post and its comments; deleting a missing post is a no-op"""
    service.delete_post(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Comment Endpoints ---

@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: int,
    comment: CommentInput,
    service: PublishingService = Depends(get_publishing_service)
):
    return service.create_comment(post_id, comment)


@router.get("/{post_id}/comments", response_model=List[CommentResponse])
def get_post_comments(post_id: int, db: Session = Depends(get_db)):
    """Get all comments for a post, newest first"""
    catalog.get_post(db, post_id)
    return catalog.list_comments(db, post_id)
