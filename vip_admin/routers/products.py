"""Create and edit forms for VIP numbers and number packs."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from vip_admin.auth.session import AdminSession
from vip_admin.core.deps import get_page_size, get_store, require_admin
from vip_admin.core.errors import AdminError, RecordNotFoundError
from vip_admin.listing.entities import NUMBER_PACKS, VIP_NUMBERS, EntitySpec
from vip_admin.listing.views import ListView, ListViewRegistry, Notice, get_list_views
from vip_admin.models.records import CategoryType, NumberPackForm, VipNumberForm, validate_form
from vip_admin.services.categories import CategoryService
from vip_admin.services.products import available_vip_numbers, format_pack_items, parse_pack_items
from vip_admin.store.base import DocumentStore
from vip_admin.templates import templates

router = APIRouter(prefix="/admin", tags=["products"])

_PRODUCTS: dict[str, tuple[EntitySpec, CategoryType, str]] = {
    VIP_NUMBERS.slug: (VIP_NUMBERS, "individual", "vip_number_form.html"),
    NUMBER_PACKS.slug: (NUMBER_PACKS, "pack", "number_pack_form.html"),
}


class ProductForms:
    """Per-request helper bundling the store, the session's view and categories."""

    def __init__(
        self,
        request: Request,
        session: Annotated[AdminSession, Depends(require_admin)],
        store: Annotated[DocumentStore, Depends(get_store)],
        views: Annotated[ListViewRegistry, Depends(get_list_views)],
        page_size: Annotated[int, Depends(get_page_size)],
    ):
        self.request = request
        self.session = session
        self.store = store
        self.views = views
        self.page_size = page_size
        self.categories = CategoryService(store)

    async def view(self, entity: EntitySpec) -> ListView:
        return await self.views.open(
            self.session.session_id,
            entity,
            self.store,
            self.page_size,
            expires_at=self.session.expires_at,
        )

    async def form_data(self) -> dict[str, Any]:
        form = await self.request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    async def render(
        self,
        slug: str,
        *,
        action: str,
        values: dict[str, Any],
        errors: dict[str, str] | None = None,
        notices: list[Notice] | None = None,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        entity, category_type, template = _PRODUCTS[slug]
        context: dict[str, Any] = {
            "entity": entity,
            "action": action,
            "editing": action.endswith("/edit"),
            "values": values,
            "errors": errors or {},
            "notices": notices or [],
        }
        try:
            context["categories"] = await self.categories.list_categories(category_type)
            if slug == NUMBER_PACKS.slug:
                context["picker"] = await available_vip_numbers(self.store)
        except AdminError as e:
            context["categories"] = []
            context["picker"] = []
            context["notices"].append(Notice.from_error("Error Loading Categories", e))
        return templates.TemplateResponse(
            self.request, template, context, status_code=status_code
        )

    async def validate(self, slug: str, data: dict[str, Any]) -> Any:
        """Validate submitted form data into the write model.

        Raises:
            RecordValidationError: bad field values or unknown category.
        """
        _, category_type, _ = _PRODUCTS[slug]
        if slug == NUMBER_PACKS.slug:
            picker = await available_vip_numbers(self.store)
            payload = {**data, "numbers": parse_pack_items(data.get("items", ""), picker)}
            form = validate_form(NumberPackForm, payload)
        else:
            form = validate_form(VipNumberForm, data)
        await self.categories.require_slug(form.category_slug, category_type)
        return form

    async def save(self, slug: str, action: str, record_id: str | None = None):
        entity, _, _ = _PRODUCTS[slug]
        data = await self.form_data()
        try:
            form = await self.validate(slug, data)
        except AdminError as e:
            return await self.render(
                slug,
                action=action,
                values=data,
                errors=e.details.get("fields", {}),
                notices=[Notice.from_error("Error", e)],
                status_code=e.http_status,
            )

        view = await self.view(entity)
        if record_id is None:
            result = await view.create(form)
        else:
            result = await view.update(record_id, form)
        if not result.ok:
            error = result.error
            return await self.render(
                slug,
                action=action,
                values=data,
                errors=error.details.get("fields", {}) if error else {},
                notices=view.take_notices(),
                status_code=error.http_status if error else status.HTTP_400_BAD_REQUEST,
            )
        return RedirectResponse(url=f"/admin/{slug}", status_code=status.HTTP_303_SEE_OTHER)

    async def load(self, slug: str, record_id: str) -> dict[str, Any]:
        entity, _, _ = _PRODUCTS[slug]
        try:
            record = await self.store.get(entity.collection, record_id)
        except RecordNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
        values = record.model_dump()
        if slug == NUMBER_PACKS.slug:
            values["items"] = format_pack_items(record)
        return values


def _new_url(slug: str) -> str:
    return f"/admin/{slug}/new"


def _edit_url(slug: str, record_id: str) -> str:
    return f"/admin/{slug}/{record_id}/edit"


@router.get("/vip-numbers/new", response_class=HTMLResponse)
async def new_vip_number(forms: Annotated[ProductForms, Depends()]):
    return await forms.render(VIP_NUMBERS.slug, action=_new_url(VIP_NUMBERS.slug), values={})


@router.post("/vip-numbers/new")
async def create_vip_number(forms: Annotated[ProductForms, Depends()]):
    """Add a VIP number; rejected locally when the number already exists."""
    return await forms.save(VIP_NUMBERS.slug, _new_url(VIP_NUMBERS.slug))


@router.get("/vip-numbers/{record_id}/edit", response_class=HTMLResponse)
async def edit_vip_number(record_id: str, forms: Annotated[ProductForms, Depends()]):
    values = await forms.load(VIP_NUMBERS.slug, record_id)
    return await forms.render(
        VIP_NUMBERS.slug, action=_edit_url(VIP_NUMBERS.slug, record_id), values=values
    )


@router.post("/vip-numbers/{record_id}/edit")
async def update_vip_number(record_id: str, forms: Annotated[ProductForms, Depends()]):
    return await forms.save(
        VIP_NUMBERS.slug, _edit_url(VIP_NUMBERS.slug, record_id), record_id=record_id
    )


@router.get("/number-packs/new", response_class=HTMLResponse)
async def new_number_pack(forms: Annotated[ProductForms, Depends()]):
    return await forms.render(NUMBER_PACKS.slug, action=_new_url(NUMBER_PACKS.slug), values={})


@router.post("/number-packs/new")
async def create_number_pack(forms: Annotated[ProductForms, Depends()]):
    return await forms.save(NUMBER_PACKS.slug, _new_url(NUMBER_PACKS.slug))


@router.get("/number-packs/{record_id}/edit", response_class=HTMLResponse)
async def edit_number_pack(record_id: str, forms: Annotated[ProductForms, Depends()]):
    values = await forms.load(NUMBER_PACKS.slug, record_id)
    return await forms.render(
        NUMBER_PACKS.slug, action=_edit_url(NUMBER_PACKS.slug, record_id), values=values
    )


@router.post("/number-packs/{record_id}/edit")
async def update_number_pack(record_id: str, forms: Annotated[ProductForms, Depends()]):
    return await forms.save(
        NUMBER_PACKS.slug, _edit_url(NUMBER_PACKS.slug, record_id), record_id=record_id
    )
