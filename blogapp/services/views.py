import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blogapp.errors import NotFoundError, StorageError
from blogapp.models.post import Post

logger = logging.getLogger(__name__)


def record_view(db: Session, post_id: int) -> None:
    """
    Increment a post's view count by one and commit.

    The increment runs as a single UPDATE evaluated by the database, so
    concurrent readers never overwrite each other's counts.
    """
    try:
        updated = (
            db.query(Post)
            .filter(Post.id == post_id)
            .update({Post.view_count: Post.view_count + 1}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to record view for post %s", post_id)
        raise StorageError("Failed to record view", {"post_id": post_id}) from e

    if not updated:
        raise NotFoundError("Blog post not found", {"post_id": post_id})
