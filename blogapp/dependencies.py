# blogapp/dependencies.py
from fastapi import Depends
from sqlalchemy.orm import Session

from blogapp.config import Settings, get_settings
from blogapp.database import get_db
from blogapp.services.moderation import ModerationFilter
from blogapp.services.publishing import PublishingService
from blogapp.services.uploads import LocalUploadStore, UploadStore

MAX_PAGE_SIZE = 100


def get_moderation_filter(settings: Settings = Depends(get_settings)) -> ModerationFilter:
    return ModerationFilter(settings.prohibited_terms)


def get_upload_store(settings: Settings = Depends(get_settings)) -> UploadStore:
    return LocalUploadStore(settings.upload_dir, settings.upload_url_prefix)


def get_publishing_service(
    db: Session = Depends(get_db),
    moderation: ModerationFilter = Depends(get_moderation_filter),
    uploads: UploadStore = Depends(get_upload_store),
) -> PublishingService:
    return PublishingService(db, moderation, uploads)


def get_page_size(page_size: int | None = None, settings: Settings = Depends(get_settings)) -> int:
    """Requested page size, falling back to the configured default and capped at MAX_PAGE_SIZE."""
    size = page_size if page_size and page_size > 0 else settings.page_size
    return min(size, MAX_PAGE_SIZE)
