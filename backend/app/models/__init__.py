"""
East Village Everything — ORM Models
======================================

Importing this package registers every table with Base.metadata, which is
what Alembic's autogenerate and the test fixtures' create_all() read.
"""

from app.models.tag import Tag
from app.models.place import Place, place_tags
from app.models.user import User

__all__ = ["Tag", "Place", "place_tags", "User"]
