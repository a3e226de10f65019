"""
Photoshare Backend - ORM Models
================================

Importing this package registers every table on `Base.metadata`
(required by `create_tables()` and Alembic autogenerate).
"""

from photoshare.models.user import User
from photoshare.models.photo import Photo
from photoshare.models.comment import Comment
from photoshare.models.like import Like

__all__ = ["User", "Photo", "Comment", "Like"]
