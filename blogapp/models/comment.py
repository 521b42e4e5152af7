from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from blogapp.database import Base
from blogapp.utils import utcnow

class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_name = Column(String(100), nullable=False)
    author_email = Column(String(255), nullable=False)
    body = Column(String(1000), nullable=False)
    posted_at = Column(DateTime, nullable=False, default=utcnow)
