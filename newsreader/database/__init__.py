"""
Database module - SQLite storage for folders, feeds and articles.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBArticle, DBFeed, DBFolder
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .folder_repository import FolderRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBArticle",
    "DBFeed",
    "DBFolder",
    "ArticleRepository",
    "FeedRepository",
    "FolderRepository",
]
