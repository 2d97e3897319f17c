"""Custom exceptions for the student record store."""


class StudentStoreError(Exception):
    """Base exception for student record store errors."""


class StorageError(StudentStoreError):
    """The backing database failed to complete an operation."""
