"""
Row-level persistence shared by all repositories.

Repositories read and write rows; they never decide business rules. Services
control transaction boundaries: ``add`` and ``flush`` stage work, while
``create``, ``save`` and ``delete`` commit immediately.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

ModelT = TypeVar("ModelT", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[ModelT]):
    """Session wrapper bound to one mapped model class."""

    def __init__(self, model: type[ModelT], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, pk: int) -> ModelT | None:
        return self.db.get(self.model, pk)

    # Staged writes

    def add(self, entity: ModelT) -> None:
        """Stage ``entity`` for the next commit."""
        self.db.add(entity)

    def flush(self) -> None:
        """Send staged rows to the database so constraints fire early."""
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, entity: ModelT) -> None:
        self.db.refresh(entity)

    # Immediate writes

    def create(self, entity: ModelT) -> ModelT:
        """Insert ``entity`` and return it with generated columns loaded."""
        self.add(entity)
        return self.save(entity)

    def save(self, entity: ModelT) -> ModelT:
        """Commit changes made to a tracked ``entity`` and reload it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.commit()
