"""Student Store - Persistent storage for student records."""

from student_records.store.database import Database
from student_records.store.exceptions import StorageError, StudentStoreError
from student_records.store.models import Student
from student_records.store.repository import StudentRepository

__all__ = [
    "Database",
    "StorageError",
    "Student",
    "StudentRepository",
    "StudentStoreError",
]
