import pytest
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, OperationalError

from blogapp.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from blogapp.models import Author, Category, Comment, Post
from blogapp.schemas import PostInput
from blogapp.services.publishing import ImageUpload, PublishingService
from blogapp.services.slugs import SlugResolver


def post_data(author, category, **overrides):
    data = {"title": "Hello World", "body": "Body text", "author_id": author.id, "category_id": category.id}
    data.update(overrides)
    return data


def comment_data(**overrides):
    data = {"author_name": "Bob", "author_email": "bob@example.com", "body": "Great post"}
    data.update(overrides)
    return data


def fail_commit(db, monkeypatch):
    def _commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", _commit)


# --- create_post ---

def test_create_post_derives_slug_and_defaults(service, author, category):
    post = service.create_post(post_data(author, category))

    assert post.id is not None
    assert post.slug == "hello-world"
    assert post.view_count == 0
    assert post.published_at is not None
    assert post.modified_at is None
    assert post.featured_image is None


def test_same_title_gets_numeric_suffix(service, author, category):
    first = service.create_post(post_data(author, category))
    second = service.create_post(post_data(author, category))
    third = service.create_post(post_data(author, category))

    assert [first.slug, second.slug, third.slug] == ["hello-world", "hello-world-1", "hello-world-2"]


def test_create_post_accepts_schema_instance(service, author, category):
    post = service.create_post(PostInput(**post_data(author, category, meta_title="SEO")))
    assert post.meta_title == "SEO"


def test_provided_slug_is_used_verbatim(service, author, category):
    post = service.create_post(post_data(author, category, slug="Custom Slug"))
    assert post.slug == "Custom Slug"


def test_provided_slug_collision_conflicts(service, author, category):
    service.create_post(post_data(author, category, slug="taken"))
    with pytest.raises(ConflictError):
        service.create_post(post_data(author, category, title="Other", slug="taken"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": ""},
        {"title": "   "},
        {"title": "x" * 201},
        {"body": ""},
        {"meta_title": "x" * 151},
        {"meta_description": "x" * 301},
        {"meta_keywords": "x" * 251},
        {"slug": "x" * 201},
        {"author_id": None},
        {"category_id": "abc"},
    ],
)
def test_create_post_validation(service, author, category, overrides):
    with pytest.raises(ValidationError) as exc_info:
        service.create_post(post_data(author, category, **overrides))
    assert exc_info.value.details["errors"]


def test_create_post_requires_existing_author(service, category):
    missing = Author(id=404)
    with pytest.raises(DependencyError):
        service.create_post(post_data(missing, category))


def test_create_post_requires_existing_category(service, author):
    missing = Category(id=404)
    with pytest.raises(DependencyError):
        service.create_post(post_data(author, missing))


def test_create_post_stores_image(service, author, category):
    post = service.create_post(post_data(author, category), image=ImageUpload(b"img", "cover.png"))
    assert post.featured_image.startswith("/uploads/")
    assert post.featured_image.endswith("_cover.png")


def test_create_post_without_upload_store(db, moderation, author, category):
    service = PublishingService(db, moderation)
    with pytest.raises(StorageError):
        service.create_post(post_data(author, category), image=ImageUpload(b"img", "cover.png"))


def test_failed_insert_reports_stored_image(service, db, author, category, monkeypatch):
    fail_commit(db, monkeypatch)
    with pytest.raises(StorageError) as exc_info:
        service.create_post(post_data(author, category), image=ImageUpload(b"img", "cover.png"))
    assert exc_info.value.image_reference.endswith("_cover.png")


def test_slug_race_is_rejected_at_commit(service, db, author, category, monkeypatch):
    service.create_post(post_data(author, category))

    # Simulate a concurrent writer that passed the pre-check first
    monkeypatch.setattr(SlugResolver, "is_taken", lambda self, slug, exclude_post_id=None: False)
    with pytest.raises(ConflictError):
        service.create_post(post_data(author, category))

    assert db.query(Post).count() == 1


# --- update_post ---

def test_update_post_keeps_own_slug(service, author, category):
    post = service.create_post(post_data(author, category))
    updated = service.update_post(post.id, post_data(author, category, body="Edited", slug="hello-world"))

    assert updated.slug == "hello-world"
    assert updated.body == "Edited"
    assert updated.modified_at is not None


def test_update_post_rederives_slug_without_self_conflict(service, author, category):
    post = service.create_post(post_data(author, category))
    updated = service.update_post(post.id, post_data(author, category))
    assert updated.slug == "hello-world"


def test_update_post_new_title_gets_new_slug(service, author, category):
    service.create_post(post_data(author, category, title="Taken Title"))
    post = service.create_post(post_data(author, category))

    updated = service.update_post(post.id, post_data(author, category, title="Taken Title"))
    assert updated.slug == "taken-title-1"


def test_update_post_slug_conflict(service, author, category):
    service.create_post(post_data(author, category, slug="first"))
    post = service.create_post(post_data(author, category, slug="second"))

    with pytest.raises(ConflictError):
        service.update_post(post.id, post_data(author, category, slug="first"))


def test_update_post_preserves_image_without_upload(service, author, category):
    post = service.create_post(post_data(author, category), image=ImageUpload(b"img", "cover.png"))
    original = post.featured_image

    updated = service.update_post(post.id, post_data(author, category, title="New"))
    assert updated.featured_image == original


def test_update_post_replaces_image_with_upload(service, author, category):
    post = service.create_post(post_data(author, category), image=ImageUpload(b"img", "cover.png"))
    original = post.featured_image

    updated = service.update_post(post.id, post_data(author, category), image=ImageUpload(b"new", "new.jpg"))
    assert updated.featured_image != original
    assert updated.featured_image.endswith("_new.jpg")


def test_update_post_preserves_views_and_publish_date(service, db, author, category):
    post = service.create_post(post_data(author, category))
    published_at = post.published_at
    post.view_count = 5
    db.commit()

    updated = service.update_post(post.id, post_data(author, category, body="Edited"))
    assert updated.view_count == 5
    assert updated.published_at == published_at


def test_update_missing_post(service, author, category):
    with pytest.raises(NotFoundError):
        service.update_post(404, post_data(author, category))


def test_update_post_validation(service, author, category):
    post = service.create_post(post_data(author, category))
    with pytest.raises(ValidationError):
        service.update_post(post.id, post_data(author, category, title=""))


def test_update_post_missing_category(service, db, author, category):
    post = service.create_post(post_data(author, category))
    with pytest.raises(DependencyError):
        service.update_post(post.id, post_data(author, Category(id=404)))

    db.refresh(post)
    assert post.category_id == category.id


# --- delete_post ---

def test_delete_post_cascades_comments(service, db, author, category):
    post = service.create_post(post_data(author, category))
    comment_ids = [service.create_comment(post.id, comment_data(body=f"Comment {n}")).id for n in range(3)]
    keeper = service.create_post(post_data(author, category, title="Keeper"))
    kept_comment = service.create_comment(keeper.id, comment_data())

    assert service.delete_post(post.id) is True

    assert db.get(Post, post.id) is None
    for comment_id in comment_ids:
        assert db.get(Comment, comment_id) is None
    assert db.get(Comment, kept_comment.id) is not None


def test_delete_post_is_atomic(service, db, author, category, monkeypatch):
    post = service.create_post(post_data(author, category))
    service.create_comment(post.id, comment_data())

    fail_commit(db, monkeypatch)
    with pytest.raises(StorageError):
        service.delete_post(post.id)
    monkeypatch.undo()

    assert db.query(Post).count() == 1
    assert db.query(Comment).count() == 1


def test_delete_missing_post_is_noop(service):
    assert service.delete_post(404) is False


def test_delete_missing_post_strict(service):
    with pytest.raises(NotFoundError):
        service.delete_post(404, missing_ok=False)


def test_store_cascades_comments_on_raw_delete(service, db, author, category):
    post = service.create_post(post_data(author, category))
    service.create_comment(post.id, comment_data())

    db.execute(delete(Post).where(Post.id == post.id))
    db.commit()
    assert db.query(Comment).count() == 0


# --- comments ---

def test_create_comment(service, author, category):
    post = service.create_post(post_data(author, category))
    comment = service.create_comment(post.id, comment_data())

    assert comment.id is not None
    assert comment.post_id == post.id
    assert comment.posted_at is not None


def test_create_comment_rejects_prohibited_term(service, db, author, category):
    post = service.create_post(post_data(author, category))

    with pytest.raises(ValidationError) as exc_info:
        service.create_comment(post.id, comment_data(body="this is BADWORD1 text"))

    assert exc_info.value.details["term"] == "badword1"
    assert "badword1" in exc_info.value.message
    assert db.query(Comment).count() == 0


def test_create_comment_unknown_post(service):
    with pytest.raises(NotFoundError):
        service.create_comment(404, comment_data())


@pytest.mark.parametrize(
    "overrides",
    [{"author_name": ""}, {"author_email": "not-an-email"}, {"body": ""}, {"body": "x" * 1001}, {"author_name": "x" * 101}],
)
def test_create_comment_validation(service, author, category, overrides):
    post = service.create_post(post_data(author, category))
    with pytest.raises(ValidationError):
        service.create_comment(post.id, comment_data(**overrides))


# --- authors and categories ---

def test_create_author_validation(service):
    with pytest.raises(ValidationError):
        service.create_author({"name": "Ada", "email": "nope"})
    with pytest.raises(ValidationError):
        service.create_author({"name": "", "email": "ada@example.com"})


def test_create_category_validation(service):
    with pytest.raises(ValidationError):
        service.create_category({"name": "x" * 101})


def test_delete_referenced_author_is_denied(service, db, author, category):
    service.create_post(post_data(author, category))

    with pytest.raises(DependencyError) as exc_info:
        service.delete_author(author.id)
    assert exc_info.value.details["post_count"] == 1
    assert db.get(Author, author.id) is not None


def test_delete_referenced_category_is_denied(service, db, author, category):
    service.create_post(post_data(author, category))

    with pytest.raises(DependencyError):
        service.delete_category(category.id)
    assert db.get(Category, category.id) is not None


def test_delete_unreferenced_author_and_category(service, db, author, category):
    service.delete_author(author.id)
    service.delete_category(category.id)

    assert db.get(Author, author.id) is None
    assert db.get(Category, category.id) is None


def test_delete_missing_author(service):
    with pytest.raises(NotFoundError):
        service.delete_author(404)


def test_store_restricts_referenced_author_delete(service, db, author, category):
    service.create_post(post_data(author, category))

    with pytest.raises(IntegrityError):
        db.execute(delete(Author).where(Author.id == author.id))
        db.commit()
    db.rollback()


def test_storage_failure_is_surfaced(service, db, monkeypatch):
    fail_commit(db, monkeypatch)
    with pytest.raises(StorageError):
        service.create_category({"name": "Go"})
