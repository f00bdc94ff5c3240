"""
Utility helpers for running the rowmapper blog example end-to-end.
"""

from __future__ import annotations

from typing import Any, Dict, List

from rowmapper.adapters import ConnectionConfig, SQLiteAdapter
from rowmapper.config import Settings
from rowmapper.mapper import Record
from rowmapper.persistence import Session

from .tables import AUTHOR, CATEGORY, POST, SCHEMA


def bootstrap_session(dsn: str = "sqlite:///:memory:") -> Session:
    """
    Create a SQLite-backed session, ensure the blog schema exists and
    register the blog mappers.
    """

    session = Session(SQLiteAdapter(), connection_config=ConnectionConfig(url=dsn), settings=Settings())
    for statement in SCHEMA:
        session.execute(statement)
    session.register(AUTHOR)
    session.register(CATEGORY)
    posts = session.register(POST, related=("author", "category"))
    posts.hooks.register("before_insert", _copy_parent_keys)
    return session


def _copy_parent_keys(post: Record, **context: Any) -> None:
    # parents inserted earlier in the same transaction only have keys by now
    if post.author is not None:
        post.author_id = post.author.id
    if post.category is not None:
        post.category_id = post.category.id


def seed_sample_data(session: Session) -> Dict[str, List[Dict[str, Any]]]:
    """
    Populate authors, categories, and posts in a single transaction.
    """

    authors = [
        session.new_record("author", name="Alice Carter", email="alice@example.com", bio="Editor-in-chief."),
        session.new_record("author", name="Brian Kim", email="brian@example.com", bio="Performance specialist."),
    ]
    categories = [
        session.new_record("category", name="Announcements", description="Release notes and launch news."),
        session.new_record("category", name="Guides", description="Deep dives and tutorials."),
    ]
    posts = [
        session.new_record(
            "post",
            title="Introducing rowmapper",
            body="This guide walks through sessions, mappers, and transactions.",
            published=True,
            author=authors[0],
            category=categories[0],
        ),
        session.new_record(
            "post",
            title="Rolling Back Cleanly",
            body="A failed transaction restores every record it touched.",
            published=True,
            author=authors[1],
            category=categories[1],
        ),
    ]

    transaction = session.new_transaction()
    for record in [*authors, *categories, *posts]:
        transaction.insert(record)
    if not transaction.exec():
        raise RuntimeError("Seeding the blog example failed") from transaction.get_exception()

    return {
        "authors": [author.row.to_dict() for author in authors],
        "categories": [category.row.to_dict() for category in categories],
        "posts": [post.row.to_dict() for post in posts],
    }


def fetch_recent_posts(session: Session, limit: int = 5) -> List[Dict[str, Any]]:
    """
    Newest published posts, newest first, with author and category names.
    Parents come from the identity maps when they are already loaded.
    """

    feed: List[Dict[str, Any]] = []
    recent = session.select("post", published=True).order_by("-id").limit(limit)
    for post in recent.fetch_record_set():
        author = session.fetch_record("author", post.author_id)
        category = session.fetch_record("category", post.category_id)
        feed.append(
            {
                "id": post.id,
                "title": post.title,
                "published": bool(post.published),
                "author_name": author.name if author else None,
                "category_name": category.name if category else None,
            }
        )
    return feed


def posts_by_author(session: Session) -> List[Dict[str, Any]]:
    """
    Resolve each author's posts through the mappers; repeated lookups reuse
    the rows already held by the identity maps.
    """

    result: List[Dict[str, Any]] = []
    for author in session.select("author").order_by("id").fetch_record_set():
        posts = session.fetch_record_set_by("post", author_id=author.id)
        result.append({"author": author.name, "posts": [post.title for post in posts]})
    return result


def run_demo(dsn: str = "sqlite:///:memory:") -> List[Dict[str, Any]]:
    """
    Seed a fresh database and return its feed.
    """

    with bootstrap_session(dsn=dsn) as session:
        seed_sample_data(session)
        return fetch_recent_posts(session)


if __name__ == "__main__":
    for entry in run_demo("sqlite:///blog_demo.db"):
        print(f"#{entry['id']} {entry['title']} ({entry['category_name']}, {entry['author_name']})")
