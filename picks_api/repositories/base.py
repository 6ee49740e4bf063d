"""
Base repository class for the data access layer.

Repositories own every query against their table; routes and services never
build SQLAlchemy queries themselves. Writes are added to the session but not
committed: the caller decides when a unit of work ends (``save()``).

Example:
    class PredictionRepository(BaseRepository[Prediction]):
        def find_premium(self) -> List[Prediction]:
            return self.where(Prediction.is_premium.is_(True))
"""
from abc import ABC
from datetime import datetime
from typing import TypeVar, Generic, Type, Optional, List, Any, Mapping

from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """
    Common data access methods for one SQLAlchemy model.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The database session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    # ========================================================================
    # CRUD Operations
    # ========================================================================

    def find_by_id(self, id: Any) -> Optional[T]:
        """Find a single record by primary key."""
        return self.db.get(self.model_type, id)

    def find_all(
        self,
        *criterion,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[str] = None
    ) -> List[T]:
        """
        Find records matching optional criteria.

        Args:
            criterion: SQLAlchemy filter expressions
            limit: Maximum number of records to return
            offset: Number of records to skip
            order_by: Column name to order by (prefix with '-' for descending)
        """
        query = self.query()
        if criterion:
            query = query.filter(*criterion)

        if order_by:
            if order_by.startswith('-'):
                query = query.order_by(desc(getattr(self.model_type, order_by[1:])))
            else:
                query = query.order_by(getattr(self.model_type, order_by))

        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all()

    def create(self, **kwargs) -> T:
        """
        Create a new record.

        Returns:
            The created record, flushed so generated keys are populated
        """
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        self.db.flush()
        return instance

    def update(self, id: Any, changes: Mapping[str, Any]) -> Optional[T]:
        """
        Apply a partial update to a record.

        Only the keys present in ``changes`` are written; ``updated_at`` is
        bumped when the model has one.

        Returns:
            The updated record, or None if not found
        """
        instance = self.find_by_id(id)
        if instance is None:
            return None
        for key, value in changes.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        if hasattr(instance, "updated_at"):
            instance.updated_at = datetime.utcnow()
        self.db.flush()
        return instance

    def delete(self, id: Any) -> bool:
        """
        Delete a record by primary key.

        Returns:
            True if deleted, False if not found
        """
        instance = self.find_by_id(id)
        if instance is None:
            return False
        self.db.delete(instance)
        self.db.flush()
        return True

    # ========================================================================
    # Query Builders
    # ========================================================================

    def query(self) -> Query:
        """Get a new query object for this model."""
        return self.db.query(self.model_type)

    def where(self, *criterion) -> List[T]:
        """Filter records using SQLAlchemy expressions."""
        return self.query().filter(*criterion).all()

    def where_first(self, *criterion) -> Optional[T]:
        """Filter records using SQLAlchemy expressions and return first match."""
        return self.query().filter(*criterion).first()

    # ========================================================================
    # Existence & Counting
    # ========================================================================

    def exists_where(self, *criterion) -> bool:
        """Check if any record matching the criterion exists."""
        return bool(self.db.query(self.query().filter(*criterion).exists()).scalar())

    def count(self, *criterion) -> int:
        """Count records matching optional criterion."""
        query = self.db.query(func.count(self.model_type.id))
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0

    # ========================================================================
    # Unit of work
    # ========================================================================

    def save(self) -> None:
        """Commit pending changes to the database."""
        self.db.commit()

    def refresh(self, instance: T) -> T:
        """Refresh an instance from the database."""
        self.db.refresh(instance)
        return instance

    def rollback(self) -> None:
        """Rollback pending changes."""
        self.db.rollback()
