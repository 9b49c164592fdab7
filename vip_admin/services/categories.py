"""Category management.

Categories are a short list shown in full (no pagination), ordered by
``order`` ascending and then newest first.
"""

from vip_admin.core.errors import RecordValidationError
from vip_admin.core.logging import get_logger
from vip_admin.listing.query import CREATED_AT, Limit, OrderBy, StoreQuery, Where
from vip_admin.models.records import CategoryForm, CategoryRecord, CategoryType
from vip_admin.store.base import DocumentStore
from vip_admin.store.collections import CATEGORIES

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_categories(self, category_type: CategoryType | None = None) -> list[CategoryRecord]:
        constraints = []
        if category_type is not None:
            constraints.append(Where("type", "==", category_type))
        constraints += [OrderBy("order", "asc"), OrderBy(CREATED_AT, "desc")]
        return await self.store.query(StoreQuery(CATEGORIES, tuple(constraints)))

    async def next_order(self) -> int:
        """Order value for a new category: one past the highest, 0 when empty."""
        top = await self.store.query(StoreQuery(CATEGORIES, (OrderBy("order", "desc"), Limit(1))))
        return top[0].order + 1 if top else 0

    async def get(self, category_id: str) -> CategoryRecord:
        return await self.store.get(CATEGORIES, category_id)

    async def create(self, form: CategoryForm) -> CategoryRecord:
        record = await self.store.add(CATEGORIES, form)
        logger.info(f"Category '{record.title}' created", extra={"record_id": record.id})
        return record

    async def update(self, category_id: str, form: CategoryForm) -> CategoryRecord:
        return await self.store.update(CATEGORIES, category_id, form)

    async def delete(self, category_id: str, confirmed: bool) -> bool:
        """Delete a category; returns False when the deletion was not confirmed."""
        if not confirmed:
            return False
        await self.store.delete(CATEGORIES, category_id)
        return True

    async def slugs_for(self, category_type: CategoryType) -> set[str]:
        return {c.slug for c in await self.list_categories(category_type)}

    async def require_slug(self, slug: str, category_type: CategoryType) -> None:
        """Reject a product whose category does not exist for its type."""
        if slug not in await self.slugs_for(category_type):
            raise RecordValidationError(
                f'Category "{slug}" does not exist.',
                details={"fields": {"category_slug": "Unknown category."}},
            )
