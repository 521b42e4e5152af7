"""
CATALOG MANAGEMENT HELPER
Quick script to set up and inspect the blog catalog database.

Usage:
    python manage_catalog.py --init
    python manage_catalog.py --list [--page N] [--title TEXT] [--category ID]
    python manage_catalog.py --stats <slug>
    python manage_catalog.py --delete <post_id>
"""

import sys

from blogapp.config import get_settings
from blogapp.database import SessionLocal, init_db
from blogapp.errors import CatalogError
from blogapp.logging_config import configure_logging
from blogapp.models import Author, Category, Comment
from blogapp.services import catalog
from blogapp.services.moderation import ModerationFilter
from blogapp.services.publishing import PublishingService

DEFAULT_CATEGORIES = ["C#", "ASP.NET Core", "SQL Server", "Java"]
DEFAULT_AUTHORS = [
    ("Pranaya Rout", "Pranaya.Rout@example.com"),
    ("Rakesh Kumar", "Rakesh.Kumar@example.com"),
    ("Hina Sharma", "Hina.Sharma@example.com"),
]


def _service(db):
    return PublishingService(db, ModerationFilter(get_settings().prohibited_terms))


def init_catalog():
    """Create tables and seed default categories and authors"""
    init_db()
    db = SessionLocal()

    try:
        service = _service(db)
        created = 0

        if db.query(Category).count() == 0:
            for name in DEFAULT_CATEGORIES:
                service.create_category({"name": name})
                created += 1

        if db.query(Author).count() == 0:
            for name, email in DEFAULT_AUTHORS:
                service.create_author({"name": name, "email": email})
                created += 1

        print(f"Catalog ready ({created} seed records created)")
        return True
    finally:
        db.close()


def list_posts(page=1, title=None, category_id=None):
    """List one page of posts"""
    db = SessionLocal()

    try:
        filters = catalog.PostFilter(title_contains=title, category_id=category_id)
        result = catalog.list_posts(db, filters, page, get_settings().page_size)

        if not result.items:
            print("No posts found.")
            return

        print(f"\nPOSTS (page {result.current_page} of {result.total_pages}, {result.total_items} total)\n")
        print(f"{'ID':<6} {'Slug':<40} {'Views':<8} {'Published':<20}")
        print("-" * 76)

        for p in result.items:
            print(f"{p.id:<6} {p.slug or '-':<40} {p.view_count:<8} {p.published_at.strftime('%Y-%m-%d %H:%M'):<20}")

        print()
    finally:
        db.close()


def get_post_stats(slug):
    """Show stats for a post without counting a view"""
    db = SessionLocal()

    try:
        try:
            post = catalog.get_post_by_slug(db, slug)
        except CatalogError as e:
            print(f"Error: {e.message}")
            return False

        comment_count = db.query(Comment).filter(Comment.post_id == post.id).count()

        print(f"\nPOST STATS: {post.slug}\n")
        print(f"Title:      {post.title}")
        print(f"Views:      {post.view_count}")
        print(f"Comments:   {comment_count}")
        print(f"Published:  {post.published_at.strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"Modified:   {post.modified_at.strftime('%Y-%m-%d %H:%M:%S') if post.modified_at else 'Never'}")
        print()

        return True
    finally:
        db.close()


def delete_post(post_id):
    """Delete a post and its comments"""
    db = SessionLocal()

    try:
        if _service(db).delete_post(post_id):
            print(f"Post {post_id} has been deleted")
            return True

        print(f"Post {post_id} not found, nothing to delete")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging("WARNING")

    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1]

    if command == "--init":
        init_catalog()

    elif command == "--list":
        page = 1
        title = None
        category_id = None

        # Parse optional arguments
        i = 2
        while i < len(sys.argv):
            if sys.argv[i] == "--page" and i + 1 < len(sys.argv):
                page = int(sys.argv[i + 1])
                i += 2
            elif sys.argv[i] == "--title" and i + 1 < len(sys.argv):
                title = sys.argv[i + 1]
                i += 2
            elif sys.argv[i] == "--category" and i + 1 < len(sys.argv):
                category_id = int(sys.argv[i + 1])
                i += 2
            else:
                i += 1

        list_posts(page, title, category_id)

    elif command == "--stats":
        if len(sys.argv) < 3:
            print("Usage: python manage_catalog.py --stats <slug>")
            sys.exit(1)
        get_post_stats(sys.argv[2])

    elif command == "--delete":
        if len(sys.argv) < 3:
            print("Usage: python manage_catalog.py --delete <post_id>")
            sys.exit(1)
        delete_post(int(sys.argv[2]))

    else:
        print(f"Unknown command: {command}")
        print(__doc__)
        sys.exit(1)
