from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from blogapp.database import Base
from blogapp.utils import utcnow

class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    body = Column(Text, nullable=False)
    featured_image = Column(String(500))
    meta_title = Column(String(150))
    meta_description = Column(String(300))
    meta_keywords = Column(String(250))
    slug = Column(String(200), unique=True, index=True)
    view_count = Column(Integer, nullable=False, default=0)
    published_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    modified_at = Column(DateTime)

    # Deleting a referenced author or category is refused by the store
    author_id = Column(Integer, ForeignKey("authors.id", ondelete="RESTRICT"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
