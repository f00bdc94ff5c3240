"""
Blog-style sample application showcasing rowmapper capabilities.
"""

from .demo import bootstrap_session, fetch_recent_posts, posts_by_author, run_demo, seed_sample_data
from .tables import AUTHOR, CATEGORY, POST

__all__ = [
    "AUTHOR",
    "CATEGORY",
    "POST",
    "bootstrap_session",
    "seed_sample_data",
    "fetch_recent_posts",
    "posts_by_author",
    "run_demo",
]
