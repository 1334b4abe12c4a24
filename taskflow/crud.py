"""Storage layer for users and tasks.

Both stores take an explicit ``Database`` and scope every task query by owner:
a task id on its own never matches anything.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from .database import Database
from .errors import DependencyError, ValidationError
from .models import Task, User
from .models.user import utcnow

logger = logging.getLogger(__name__)


class UserStore:
    """Reads and writes user records.

    Attributes:
        database: Connected database handle
    """

    def __init__(self, database: Database):
        self.database = database

    def get_user(self, user_id: str) -> Optional[User]:
        try:
            with self.database.session() as session:
                return session.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            raise DependencyError("Database unavailable") from e

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Find a user by email, ignoring case."""
        try:
            with self.database.session() as session:
                return session.exec(
                    select(User).where(User.email == email.strip().lower())
                ).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up user by email: {e}")
            raise DependencyError("Database unavailable") from e

    def create_user(self, email: str, hashed_password: str) -> User:
        """Create a user.

        Raises:
            ValidationError: If the email is already registered
        """
        user = User(email=email.strip().lower(), hashed_password=hashed_password)
        try:
            with self.database.session() as session:
                session.add(user)
                session.commit()
                session.refresh(user)
                return user
        except IntegrityError as e:
            raise ValidationError("User already exists with this email") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to create user: {e}")
            raise DependencyError("Database unavailable") from e


class TaskStore:
    """Reads and writes task records, always scoped by owner.

    Attributes:
        database: Connected database handle
    """

    def __init__(self, database: Database):
        self.database = database

    def list_tasks(self, owner_id: str) -> List[Task]:
        """All tasks owned by ``owner_id``, most recently created first."""
        try:
            with self.database.session() as session:
                statement = (
                    select(Task)
                    .where(Task.owner_id == owner_id)
                    .order_by(Task.created_at.desc())
                )
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list tasks for {owner_id}: {e}")
            raise DependencyError("Database unavailable") from e

    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        """Get a task by id, or None if missing or owned by someone else."""
        try:
            with self.database.session() as session:
                return session.exec(
                    select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
                ).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load task {task_id}: {e}")
            raise DependencyError("Database unavailable") from e

    def add_task(self, owner_id: str, values: Dict[str, Any]) -> Task:
        """Insert a task built from normalized column values."""
        task = Task(owner_id=owner_id, **values)
        try:
            with self.database.session() as session:
                session.add(task)
                session.commit()
                session.refresh(task)
                return task
        except SQLAlchemyError as e:
            logger.error(f"Failed to create task for {owner_id}: {e}")
            raise DependencyError("Database unavailable") from e

    def update_task(self, owner_id: str, task_id: str, values: Dict[str, Any]) -> Optional[Task]:
        """Overwrite the given columns and refresh ``updated_at``.

        Returns:
            Updated task, or None if no such task is owned by ``owner_id``
        """
        try:
            with self.database.session() as session:
                task = session.exec(
                    select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
                ).first()
                if task is None:
                    return None
                for key, value in values.items():
                    setattr(task, key, value)
                task.updated_at = utcnow()
                session.add(task)
                session.commit()
                session.refresh(task)
                return task
        except SQLAlchemyError as e:
            logger.error(f"Failed to update task {task_id}: {e}")
            raise DependencyError("Database unavailable") from e

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        """Hard-delete a task.

        Returns:
            True if the task was deleted, False if not found
        """
        try:
            with self.database.session() as session:
                task = session.exec(
                    select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
                ).first()
                if task is None:
                    return False
                session.delete(task)
                session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete task {task_id}: {e}")
            raise DependencyError("Database unavailable") from e
