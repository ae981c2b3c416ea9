"""
Record Store operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between the workflow services and
database operations, following the Repository pattern.
"""

from app.crud import records

__all__ = ["records"]
