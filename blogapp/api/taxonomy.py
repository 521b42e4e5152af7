from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from blogapp.database import get_db
from blogapp.dependencies import get_page_size, get_publishing_service
from blogapp.schemas import (
    AuthorInput,
    AuthorResponse,
    CategoryInput,
    CategoryPageResponse,
    CategoryResponse,
)
from blogapp.services import catalog
from blogapp.services.publishing import PublishingService

router = APIRouter(prefix="/api", tags=["taxonomy"])


@router.get("/categories", response_model=List[CategoryResponse])
def get_categories(db: Session = Depends(get_db)):
    """Get all categories ordered by name"""
    return catalog.list_categories(db)


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryInput, service: PublishingService = Depends(get_publishing_service)):
    return service.create_category(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, service: PublishingService = Depends(get_publishing_service)):
    service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/categories/{category_id}/posts", response_model=CategoryPageResponse)
def get_category_posts(
    category_id: int,
    page: Optional[int] = None,
    page_size: int = Depends(get_page_size),
    db: Session = Depends(get_db)
):
    result = catalog.list_posts_by_category(db, category_id, page, page_size)
    return CategoryPageResponse.model_validate(result, from_attributes=True)


@router.get("/authors", response_model=List[AuthorResponse])
def get_authors(db: Session = Depends(get_db)):
    return catalog.list_authors(db)


@router.post("/authors", response_model=AuthorResponse, status_code=status.HTTP_201_CREATED)
def create_author(author: AuthorInput, service: PublishingService = Depends(get_publishing_service)):
    return service.create_author(author)


@router.delete("/authors/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_author(author_id: int, service: PublishingService = Depends(get_publishing_service)):
    service.delete_author(author_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
