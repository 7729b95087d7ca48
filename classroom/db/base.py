from classroom.db.base_class import Base

# import models so Base.metadata knows every table
from classroom.models import announcement, assignment, classroom, subject, submission, user  # noqa: F401

__all__ = ["Base"]
