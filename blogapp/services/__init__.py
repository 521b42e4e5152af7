from blogapp.services.moderation import ModerationFilter, ModerationResult
from blogapp.services.publishing import ImageUpload, PublishingService
from blogapp.services.slugs import SlugResolver, derive_slug
from blogapp.services.uploads import LocalUploadStore, UploadStore
from blogapp.services.views import record_view

__all__ = [
    "ImageUpload",
    "LocalUploadStore",
    "ModerationFilter",
    "ModerationResult",
    "PublishingService",
    "SlugResolver",
    "UploadStore",
    "derive_slug",
    "record_view",
]
