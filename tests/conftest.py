import os

# Keep the module level engine off the working directory
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PROHIBITED_TERMS"] = "badword1,badword2,badword3"

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from blogapp import models  # noqa: F401
from blogapp.database import Base, make_engine
from blogapp.services.moderation import ModerationFilter
from blogapp.services.publishing import PublishingService
from blogapp.services.uploads import LocalUploadStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def moderation():
    return ModerationFilter({"badword1", "badword2", "badword3"})


@pytest.fixture
def uploads(tmp_path):
    return LocalUploadStore(str(tmp_path / "uploads"), "/uploads")


@pytest.fixture
def service(db, moderation, uploads):
    return PublishingService(db, moderation, uploads)


@pytest.fixture
def author(service):
    return service.create_author({"name": "Ada", "email": "ada@example.com"})


@pytest.fixture
def category(service):
    return service.create_category({"name": "Go"})


@pytest.fixture
def make_post(service, author, category):
    """Create posts with increasing publish times unless one is given."""
    counter = {"n": 0}

    def _make(title="Hello World", **overrides):
        counter["n"] += 1
        data = {
            "title": title,
            "body": "Body text",
            "author_id": author.id,
            "category_id": category.id,
            "published_at": BASE_TIME + timedelta(minutes=counter["n"]),
        }
        data.update(overrides)
        return service.create_post(data)

    return _make
