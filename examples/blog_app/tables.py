"""
Table metadata for the rowmapper blog example.
"""

from __future__ import annotations

from rowmapper.table import Table

AUTHOR = Table("author", ["id", "name", "email", "bio"], "id", autoincrement="id", defaults={"bio": ""})

CATEGORY = Table("category", ["id", "name", "description"], "id", autoincrement="id")

POST = Table(
    "post",
    ["id", "title", "body", "published", "author_id", "category_id"],
    "id",
    autoincrement="id",
    defaults={"published": False},
)

SCHEMA = (
    'CREATE TABLE IF NOT EXISTS "author" ('
    "id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, "
    "email TEXT NOT NULL UNIQUE, bio TEXT)",
    'CREATE TABLE IF NOT EXISTS "category" ('
    "id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL UNIQUE, description TEXT)",
    'CREATE TABLE IF NOT EXISTS "post" ('
    "id INTEGER PRIMARY KEY AUTOINCREMENT, title TEXT NOT NULL, body TEXT NOT NULL, "
    'published INTEGER NOT NULL, author_id INTEGER NOT NULL REFERENCES "author" (id), '
    'category_id INTEGER NOT NULL REFERENCES "category" (id))',
)
