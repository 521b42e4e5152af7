from sqlalchemy import Column, Integer, String
from blogapp.database import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    # Conventionally unique, not enforced
    name = Column(String(100), nullable=False, index=True)
