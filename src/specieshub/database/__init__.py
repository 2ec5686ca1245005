"""Database package for Species Hub.

Database components should be imported directly from their modules:
from specieshub.database.core import DatabaseService
"""
