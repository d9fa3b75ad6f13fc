# customer_service/services/defaults.py
"""
Single-default rule for owner-partitioned collections (addresses, measurements).

Handles:
- Create / update with an optional "make default" flag
- Explicit set-default
- Delete (no replacement default is elected)

Every flip clears the owner's existing defaults and sets the new one inside one
transaction. The clearing UPDATE is the first statement of that transaction, so
it takes the owner's row locks (PostgreSQL) or the write lock (SQLite) before
anything is read, and concurrent flips for the same owner serialize on it. The
partial unique index on (user_id) WHERE is_default is the backstop; if it ever
fires the caller gets ConflictError and nothing is committed.
"""
from __future__ import annotations
import logging
import uuid
from typing import Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import case, select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.database import transaction
from customer_service.db_models import DefaultableMixin, utcnow
from customer_service.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DefaultableMixin)

# Never written through **fields
_PROTECTED_FIELDS = frozenset({"id", "user_id", "is_default", "created_at", "updated_at"})


class ExactlyOneDefault(Generic[T]):
    """Service for a collection where each owner has at most one default item."""

    model: ClassVar[Type[Any]]
    label: ClassVar[str] = "Item"

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Queries
    # =========================================================================

    async def list(self, owner_id: uuid.UUID) -> List[T]:
        """Owner's items, default first, then newest."""
        stmt = (
            select(self.model)
            .where(self.model.user_id == owner_id)
            .order_by(self.model.is_default.desc(), self.model.created_at.desc())
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return list(result.scalars())

    async def get(self, owner_id: uuid.UUID, item_id: uuid.UUID) -> T:
        async with transaction(self.db):
            return await self._get_owned(owner_id, item_id)

    async def get_default(self, owner_id: uuid.UUID) -> Optional[T]:
        stmt = (
            select(self.model)
            .where(self.model.user_id == owner_id, self.model.is_default == True)
            .limit(1)
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

    async def count_defaults(self, owner_id: uuid.UUID) -> int:
        stmt = select(self.model.id).where(
            self.model.user_id == owner_id, self.model.is_default == True
        )
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            return len(result.all())

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create(self, owner_id: uuid.UUID, fields: Dict[str, Any], make_default: bool = False) -> T:
        """
        Add an item for the owner.

        With make_default=True the owner's current default is cleared first;
        the clear is rolled back if the insert fails.
        """
        item = self.model(**self._clean(fields), user_id=owner_id, is_default=make_default)
        async with transaction(self.db):
            if make_default:
                await self._clear_defaults(owner_id)
            self.db.add(item)
            await self.db.flush()
        logger.info(f"{self.label} {item.id} created for {owner_id} (default={make_default})")
        return item

    async def update(
        self,
        owner_id: uuid.UUID,
        item_id: uuid.UUID,
        fields: Dict[str, Any],
        make_default: Optional[bool] = None,
    ) -> T:
        """
        Apply field changes. make_default=True clears every other default of
        the owner, False drops this item's flag, None leaves it as is.
        """
        changes = self._clean(fields)
        async with transaction(self.db):
            if make_default:
                await self._clear_defaults(owner_id, except_id=item_id)
            item = await self._get_owned(owner_id, item_id, refresh=True)
            for key, value in changes.items():
                setattr(item, key, value)
            if make_default is not None:
                item.is_default = make_default
            await self.db.flush()
        return item

    async def set_default(self, owner_id: uuid.UUID, item_id: uuid.UUID) -> T:
        """Make item_id the owner's only default. NotFoundError leaves state unchanged."""
        async with transaction(self.db):
            await self._clear_defaults(owner_id)
            stmt = (
                update(self.model)
                .where(self.model.id == item_id, self.model.user_id == owner_id)
                .values(is_default=True)
            )
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                # rolls back the clear as well
                raise NotFoundError(f"{self.label} not found")
            item = await self._get_owned(owner_id, item_id, refresh=True)
        logger.info(f"{self.label} {item_id} is now default for {owner_id}")
        return item

    async def delete(self, owner_id: uuid.UUID, item_id: uuid.UUID) -> None:
        """Remove the item. Deleting the default leaves the owner without one."""
        stmt = delete(self.model).where(self.model.id == item_id, self.model.user_id == owner_id)
        async with transaction(self.db):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(f"{self.label} not found")

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _clear_defaults(self, owner_id: uuid.UUID, except_id: Optional[uuid.UUID] = None) -> None:
        # Touches every row of the owner (not only is_default=true) so the whole
        # partition is locked for the rest of the transaction.
        stmt = update(self.model).where(self.model.user_id == owner_id)
        if except_id is not None:
            stmt = stmt.where(self.model.id != except_id)
        stmt = stmt.execution_options(synchronize_session=False)
        await self.db.execute(stmt.values(
            is_default=False,
            # only rows that actually lose the flag get a new updated_at
            updated_at=case((self.model.is_default == True, utcnow()), else_=self.model.updated_at),
        ))

    async def _get_owned(self, owner_id: uuid.UUID, item_id: uuid.UUID, refresh: bool = False) -> T:
        stmt = select(self.model).where(self.model.id == item_id, self.model.user_id == owner_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError(f"{self.label} not found")
        return item

    def _clean(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        unknown = [k for k in fields if not hasattr(self.model, k)]
        if unknown:
            raise ValidationError(f"Unknown {self.label.lower()} fields: {', '.join(sorted(unknown))}")
        cleaned = {k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS}
        columns = self.model.__table__.c
        required = [k for k, v in cleaned.items() if v is None and k in columns and not columns[k].nullable]
        if required:
            raise ValidationError(f"{self.label} fields cannot be null: {', '.join(sorted(required))}")
        return cleaned
