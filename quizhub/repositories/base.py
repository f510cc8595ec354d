"""
Generic document-style repository on top of a SQLAlchemy session

Every storage call goes through here so driver failures surface as
StorageUnavailableError and duplicate keys as ConflictError.
"""
import logging
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from quizhub.exceptions import ConflictError, StorageUnavailableError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class SqlRepository(Generic[ModelT]):
    model: Type[ModelT]
    entity_name = "record"

    def __init__(self, db: Session):
        self.db = db

    def _storage_failure(self, operation: str, error: Exception) -> StorageUnavailableError:
        self.db.rollback()
        logger.error(f"Storage failure during {self.entity_name} {operation}: {error}", exc_info=True)
        return StorageUnavailableError("The storage backend is unavailable. Please try again later.")

    def _where(self, filters: Optional[Dict[str, Any]], clauses: Sequence[Any]) -> List[Any]:
        conditions = list(clauses)
        for field, value in (filters or {}).items():
            column = getattr(self.model, field)
            if isinstance(value, (list, tuple, set)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions

    def create(self, entity: ModelT) -> ModelT:
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Duplicate {self.entity_name} rejected: {e.orig}")
            raise ConflictError(f"A {self.entity_name} with the same unique key already exists.") from e
        except SQLAlchemyError as e:
            raise self._storage_failure("create", e) from e

    def save(self, entity: ModelT) -> ModelT:
        """Flush pending attribute changes of an already persisted entity"""
        return self.create(entity)

    def find_by_id(self, entity_id: Any) -> Optional[ModelT]:
        try:
            return self.db.get(self.model, entity_id)
        except SQLAlchemyError as e:
            raise self._storage_failure("lookup", e) from e

    def find_many(
        self,
        filters: Optional[Dict[str, Any]] = None,
        *clauses: Any,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        order_by: Any = None,
    ) -> List[ModelT]:
        """
        Find records matching equality / membership filters and extra clauses

        Args:
            filters: {field: value}; list values match with IN, None with IS NULL
            clauses: additional SQLAlchemy boolean expressions (AND-ed)
            page: 1-based page number, requires `limit`
            limit: page size
            order_by: SQLAlchemy ordering expression
        """
        stmt = select(self.model).where(*self._where(filters, clauses))
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit).offset(((page or 1) - 1) * limit)
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._storage_failure("query", e) from e

    def count(self, filters: Optional[Dict[str, Any]] = None, *clauses: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._where(filters, clauses))
        try:
            return self.db.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise self._storage_failure("count", e) from e

    def compare_and_set(self, entity_id: Any, field: str, expected: Any, values: Dict[str, Any]) -> bool:
        """
        Atomically apply `values` only if `field` still equals `expected`

        Returns:
            True when exactly this call performed the update
        """
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id, getattr(self.model, field) == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_failure("conditional update", e) from e
        return result.rowcount == 1

    def delete(self, entity: ModelT) -> None:
        try:
            self.db.delete(entity)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_failure("delete", e) from e

    def refresh(self, entity: ModelT) -> ModelT:
        """Reload an entity after a bulk conditional update"""
        try:
            self.db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            raise self._storage_failure("reload", e) from e
