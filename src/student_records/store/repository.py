"""StudentRepository - CRUD operations for student records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from student_records.logging import get_logger, setup_logging
from student_records.store.database import Database
from student_records.store.exceptions import StorageError
from student_records.store.models import Student

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.orm import Session

    from student_records.config import StoreConfig

logger = get_logger("store")


class StudentRepository:
    """Record store for students.

    Every operation runs in its own session and transaction. Returned
    students are detached and can be mutated and passed back to save().
    """

    def __init__(self, db_path: str = "students.db", echo: bool = False) -> None:
        """Initialize the repository.

        Creates database and tables if they don't exist.

        Args:
            db_path: SQLite file path, ":memory:", or a SQLAlchemy URL
            echo: Log every SQL statement
        """
        self._db = Database(db_path, echo=echo)
        try:
            self._db.create_tables()
        except SQLAlchemyError as e:
            self._db.close()
            raise StorageError(f"Could not initialize database: {e}") from e

    @classmethod
    def from_config(cls, config: StoreConfig, setup_logs: bool = False) -> StudentRepository:
        """Create a repository for the configured database.

        Args:
            config: Loaded store configuration
            setup_logs: Also install the rotating log handlers using the
                configured log level and directory
        """
        if setup_logs:
            setup_logging(log_dir=config.log_dir, level=config.log_level)
        logger.info("Opening student store (profile=%s)", config.profile)
        return cls(config.database_url, echo=config.echo)

    @property
    def database(self) -> Database:
        """The underlying database connection manager."""
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    def __enter__(self) -> StudentRepository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """Open a session, commit on success, roll back on failure.

        Raises:
            StorageError: If the database raises while running the operation
        """
        session = self._db.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Student %s failed: %s", operation, e)
            raise StorageError(f"Student {operation} failed: {e}") from e
        finally:
            session.close()

    # --- Write Operations ---

    def save(self, student: Student) -> Student:
        """Insert or update a student.

        A student without an id is inserted and receives a generated id.
        A student with an id overwrites the row with that id, or is inserted
        under that id when no such row exists.

        Args:
            student: The student to persist

        Returns:
            The persisted student with its id populated
        """
        unsaved = [student] if student.id is None else []
        try:
            with self._transaction("save") as session:
                saved = self._save(session, student)
        except StorageError:
            self._discard_ids(unsaved)
            raise
        logger.debug("Saved student %s", saved.id)
        return saved

    def save_all(self, students: Iterable[Student]) -> list[Student]:
        """Save several students in a single transaction.

        Args:
            students: Students to persist

        Returns:
            The persisted students, in input order
        """
        students = list(students)
        unsaved = [s for s in students if s.id is None]
        try:
            with self._transaction("save_all") as session:
                saved = [self._save(session, student) for student in students]
        except StorageError:
            self._discard_ids(unsaved)
            raise
        logger.debug("Saved %d students", len(saved))
        return saved

    @staticmethod
    def _save(session: Session, student: Student) -> Student:
        if student.id is None:
            session.add(student)
            session.flush()
            return student
        return session.merge(student)

    @staticmethod
    def _discard_ids(students: list[Student]) -> None:
        # Ids generated by a rolled-back flush were never stored
        for student in students:
            student.id = None

    def delete_by_id(self, student_id: int) -> None:
        """Delete the student with the given id. No-op if it doesn't exist.

        Args:
            student_id: The student's id
        """
        with self._transaction("delete") as session:
            deleted = session.execute(delete(Student).where(Student.id == student_id)).rowcount
        if deleted:
            logger.debug("Deleted student %s", student_id)

    def delete(self, student: Student) -> None:
        """Delete the row of the given student. No-op if it was never saved."""
        if student.id is not None:
            self.delete_by_id(student.id)

    def delete_all(self) -> None:
        """Delete every student."""
        with self._transaction("delete_all") as session:
            deleted = session.execute(delete(Student)).rowcount
        logger.debug("Deleted %d students", deleted)

    # --- Read Operations ---

    def find_by_id(self, student_id: int) -> Student | None:
        """Get student by id.

        Args:
            student_id: The student's id

        Returns:
            The Student, or None if no row has that id
        """
        with self._transaction("find_by_id") as session:
            return session.get(Student, student_id)

    def find_all(self) -> list[Student]:
        """List all students.

        Returns:
            List of all students, ordered by id
        """
        with self._transaction("find_all") as session:
            stmt = select(Student).order_by(Student.id)
            return list(session.execute(stmt).scalars().all())

    def find_all_by_id(self, student_ids: Iterable[int]) -> list[Student]:
        """List the students whose ids are given. Unknown ids are skipped.

        Returns:
            Matching students, ordered by id
        """
        ids = list(student_ids)
        if not ids:
            return []
        with self._transaction("find_all_by_id") as session:
            stmt = select(Student).where(Student.id.in_(ids)).order_by(Student.id)
            return list(session.execute(stmt).scalars().all())

    def exists_by_id(self, student_id: int) -> bool:
        """Check whether a student with the given id exists."""
        with self._transaction("exists_by_id") as session:
            stmt = select(Student.id).where(Student.id == student_id)
            return session.execute(stmt).first() is not None

    def count(self) -> int:
        """Count all students."""
        with self._transaction("count") as session:
            return session.execute(select(func.count()).select_from(Student)).scalar_one()
