"""Student Records - Persistent CRUD storage for student records."""

__version__ = "0.1.0"
