# /app/db/base.py

# This file acts as a central registry for all our SQLAlchemy models.
# Importing them here guarantees `Base.metadata` knows every table before
# `create_all` runs at startup.

from .base_class import Base

from .models.class_student_models import Class, Student
