"""
Base repository class for data access layer.

The repository pattern provides:
1. Separation of data access logic from business logic
2. Single place for query logic (easier to maintain)
3. Easier testing (can mock repositories)
4. Consistent interface for data operations

Fetchers write through `upsert`, which is keyed by the table's declared
conflict columns. Re-running an upsert with identical rows leaves the row
count unchanged; a later row for the same key overwrites the earlier one.

Example:
    class LiveOddsRepository(BaseRepository[LiveOdds]):
        def for_player(self, player_name: str) -> List[LiveOdds]:
            return self.where(LiveOdds.player_name == player_name)
"""
from abc import ABC
from typing import TypeVar, Generic, Type, Optional, List, Any, Dict, Sequence
from datetime import datetime, timedelta
from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

from app.core.logging import get_logger
from app.models.models import generate_uuid

logger = get_logger(__name__)

T = TypeVar("T")

UPSERT_CHUNK_SIZE = 500

# Filled with the current time when a row omits them
TIMESTAMP_COLUMNS = ("created_at", "updated_at", "last_updated", "calculated_at")


class BaseRepository(Generic[T], ABC):
    """
    Base repository class providing common data access methods.

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

    def find_by_id(self, id: str) -> Optional[T]:
        """Find a single record by ID."""
        return self.db.query(self.model_type).filter(self.model_type.id == id).first()

    def create(self, **kwargs) -> T:
        """Create a new record (not yet committed)."""
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        return instance

    def delete(self, id: str) -> bool:
        """Delete a record by ID. Returns False if not found."""
        instance = self.find_by_id(id)
        if instance:
            self.db.delete(instance)
            return True
        return False

    # ========================================================================
    # Query Builders
    # ========================================================================

    def query(self) -> Query:
        """Get a new query object for this model."""
        return self.db.query(self.model_type)

    def filter_by(self, **kwargs) -> List[T]:
        """Filter records by keyword arguments."""
        return self.db.query(self.model_type).filter_by(**kwargs).all()

    def filter_by_first(self, **kwargs) -> Optional[T]:
        """Filter records by keyword arguments and return first match."""
        return self.db.query(self.model_type).filter_by(**kwargs).first()

    def where(self, *criterion) -> List[T]:
        """Filter records using SQLAlchemy expressions."""
        return self.db.query(self.model_type).filter(*criterion).all()

    def where_first(self, *criterion) -> Optional[T]:
        """Filter records using SQLAlchemy expressions and return first match."""
        return self.db.query(self.model_type).filter(*criterion).first()

    def count(self, *criterion) -> int:
        """Count records matching optional criterion."""
        query = self.db.query(func.count(self.model_type.id))
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0

    def recent(
        self,
        date_field: str,
        days: int = 7,
        *additional_criterion,
        limit: Optional[int] = None
    ) -> List[T]:
        """
        Find records from the last N days, newest first.

        Args:
            date_field: Name of the date/datetime field to filter on
            days: Number of days to look back
            additional_criterion: Additional filter criteria
            limit: Optional row cap
        """
        cutoff = datetime.utcnow() - timedelta(days=days)
        column = getattr(self.model_type, date_field)
        if hasattr(column.type, "python_type") and column.type.python_type is not datetime:
            cutoff = cutoff.date()

        query = self.db.query(self.model_type).filter(column >= cutoff)
        if additional_criterion:
            query = query.filter(*additional_criterion)
        query = query.order_by(desc(column))
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    # ========================================================================
    # Batch Operations
    # ========================================================================

    def upsert(
        self,
        rows: Sequence[Dict[str, Any]],
        conflict_columns: Sequence[str],
        update: bool = True
    ) -> int:
        """
        Insert rows, resolving conflicts on the given unique columns.

        Rows sharing a conflict key within the batch are collapsed (last row
        wins) before the statement is built. With update=False existing rows
        are left untouched (ignore-duplicates).

        Args:
            rows: Column dictionaries
            conflict_columns: Columns of the table's unique constraint
            update: Overwrite existing rows (True) or skip them (False)

        Returns:
            Number of distinct rows submitted
        """
        if not rows:
            return 0

        deduped: Dict[tuple, Dict[str, Any]] = {}
        for row in rows:
            deduped[tuple(row.get(col) for col in conflict_columns)] = row

        prepared = self._prepare_rows(list(deduped.values()))
        insert = self._dialect_insert()
        table = self.model_type.__table__

        for start in range(0, len(prepared), UPSERT_CHUNK_SIZE):
            chunk = prepared[start:start + UPSERT_CHUNK_SIZE]
            stmt = insert(table).values(chunk)
            if update:
                protected = set(conflict_columns) | {"id", "created_at"}
                stmt = stmt.on_conflict_do_update(
                    index_elements=list(conflict_columns),
                    set_={
                        name: stmt.excluded[name]
                        for name in chunk[0].keys()
                        if name not in protected
                    }
                )
            else:
                stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
            self.db.execute(stmt)

        logger.debug(f"Upserted {len(prepared)} rows into {table.name}")
        return len(prepared)

    def _prepare_rows(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Give every row the same key set so one multi-VALUES insert fits all."""
        table = self.model_type.__table__
        now = datetime.utcnow()
        keys = {key for row in rows for key in row.keys() if key in table.c}

        prepared = []
        for row in rows:
            values = {key: row.get(key, self._column_default(key)) for key in keys}
            if "id" in table.c and not values.get("id"):
                values["id"] = generate_uuid()
            for stamp in TIMESTAMP_COLUMNS:
                if stamp in table.c and values.get(stamp) is None:
                    values[stamp] = now
            prepared.append(values)
        return prepared

    def _column_default(self, name: str) -> Any:
        default = self.model_type.__table__.c[name].default
        if default is not None and default.is_scalar:
            return default.arg
        return None

    def _dialect_insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise NotImplementedError(f"Upsert is not supported for dialect '{dialect}'")
        return insert

    # ========================================================================
    # Save Operations
    # ========================================================================

    def save(self) -> None:
        """Commit pending changes to the database."""
        self.db.commit()

    def flush(self) -> None:
        """Flush pending changes without committing."""
        self.db.flush()

    def refresh(self, instance: T) -> T:
        """Refresh an instance from the database."""
        self.db.refresh(instance)
        return instance

    def rollback(self) -> None:
        """Rollback pending changes."""
        self.db.rollback()
