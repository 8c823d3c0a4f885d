"""
News Reader Backend

A FastAPI backend that polls RSS and Atom feeds, stores their articles,
and serves article content through an HTML sanitizer.
"""

__version__ = "1.0.0"
