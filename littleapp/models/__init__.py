"""
Little Application: ORM Models
=================================

Importing this package registers every model with Base.metadata
(used by Database.create_all() and Alembic autogenerate).
"""

from littleapp.models.course import Course
from littleapp.models.post import Post
from littleapp.models.review import Review
from littleapp.models.user import User

__all__ = ["Course", "Post", "Review", "User"]
