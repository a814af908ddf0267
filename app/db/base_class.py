# /app/db/base_class.py

"""
Declarative base shared by every ORM model. Table names are derived from the
class name (`Class` -> `classes`, `Student` -> `students`) unless a model sets
`__tablename__` itself.
"""

from sqlalchemy.orm import declarative_base, declared_attr


class _TableNameMixin:
    @declared_attr
    def __tablename__(cls) -> str:
        name = cls.__name__.lower()
        return f"{name}es" if name.endswith("s") else f"{name}s"


Base = declarative_base(cls=_TableNameMixin)
