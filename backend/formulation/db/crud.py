"""
CRUD operations for database models.

Stores are bound to one session and never commit on their own: they add and
flush, and the caller decides the transaction boundary (see
``formulation.db.database.transaction``). Several store calls can therefore
be made atomic together.
"""
from decimal import Decimal
from typing import TypeVar, Generic, Type, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from pydantic import BaseModel

from formulation.core.errors import NotFoundError

ModelType = TypeVar("ModelType")


def storage_values(obj_in: BaseModel | Dict[str, Any]) -> Dict[str, Any]:
    """Dump a schema or dict, turning Decimals into decimal text."""
    data = obj_in.model_dump() if isinstance(obj_in, BaseModel) else dict(obj_in)
    return {
        key: (str(value) if isinstance(value, Decimal) else value)
        for key, value in data.items()
    }


class CRUDBase(Generic[ModelType]):
    """Base CRUD operations with default methods."""

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize CRUD object.

        Args:
            model: SQLAlchemy model class
            db: Database session the store operates in
        """
        self.model = model
        self.db = db

    @property
    def label(self) -> str:
        return self.model.__name__

    def get(self, id: int) -> Optional[ModelType]:
        """
        Get a single record by ID.

        Args:
            id: Record ID

        Returns:
            Model instance or None
        """
        return self.db.get(self.model, id)

    def get_or_raise(self, id: int) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If no record has this ID
        """
        obj = self.get(id)
        if obj is None:
            raise NotFoundError(f"{self.label} {id} not found")
        return obj

    def add(self, obj_in: BaseModel | Dict[str, Any]) -> ModelType:
        """
        Add a new record and flush it so it gets an ID.

        Args:
            obj_in: Pydantic schema or dict with creation data

        Returns:
            Created model instance
        """
        db_obj = self.model(**storage_values(obj_in))
        self.db.add(db_obj)
        self.db.flush()
        return db_obj

    def delete(self, id: int) -> ModelType:
        """
        Delete a record by ID.

        Returns:
            Deleted model instance

        Raises:
            NotFoundError: If no record has this ID
        """
        obj = self.get_or_raise(id)
        self.db.delete(obj)
        self.db.flush()
        return obj

    def count(self) -> int:
        """Count total records."""
        stmt = select(func.count()).select_from(self.model)
        return int(self.db.execute(stmt).scalar_one())
