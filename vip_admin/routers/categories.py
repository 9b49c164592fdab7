"""Category management pages."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from vip_admin.auth.session import AdminSession
from vip_admin.core.deps import get_store, require_admin
from vip_admin.core.errors import AdminError, RecordNotFoundError
from vip_admin.core.logging import get_logger
from vip_admin.listing.views import Notice
from vip_admin.models.records import CategoryForm, validate_form
from vip_admin.services.categories import CategoryService
from vip_admin.store.base import DocumentStore
from vip_admin.templates import templates
from vip_admin.utils.text import slugify

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/categories", tags=["categories"])

_DONE_NOTICES = {
    "created": Notice("Category Added", "The category has been added."),
    "updated": Notice("Category Updated", "The category has been updated."),
    "deleted": Notice("Category Deleted", "The category has been deleted."),
}


def get_category_service(store: Annotated[DocumentStore, Depends(get_store)]) -> CategoryService:
    return CategoryService(store)


def _form_values(data: dict[str, Any]) -> dict[str, Any]:
    values = dict(data)
    # Slug defaults to the slugified title
    if not str(values.get("slug", "")).strip():
        values["slug"] = slugify(str(values.get("title", "")))
    return values


def _render_form(
    request: Request,
    *,
    action: str,
    values: dict[str, Any],
    errors: dict[str, str] | None = None,
    notices: list[Notice] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "category_form.html",
        {
            "action": action,
            "editing": action.endswith("/edit"),
            "values": values,
            "errors": errors or {},
            "notices": notices or [],
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_categories(
    request: Request,
    categories: Annotated[CategoryService, Depends(get_category_service)],
    _: Annotated[AdminSession, Depends(require_admin)],
    done: str | None = None,
):
    """All categories, ordered by display order then newest first."""
    notices = [_DONE_NOTICES[done]] if done in _DONE_NOTICES else []
    records = []
    try:
        records = await categories.list_categories()
    except AdminError as e:
        notices.append(Notice.from_error("Error Fetching Categories", e))
    return templates.TemplateResponse(
        request, "categories.html", {"categories": records, "notices": notices}
    )


@router.get("/new", response_class=HTMLResponse)
async def new_category(
    request: Request,
    categories: Annotated[CategoryService, Depends(get_category_service)],
    _: Annotated[AdminSession, Depends(require_admin)],
):
    """Blank form with the next display order pre-filled."""
    notices = []
    try:
        next_order = await categories.next_order()
    except AdminError as e:
        next_order = 0
        notices.append(Notice.from_error("Could not fetch next category order", e))
    return _render_form(
        request,
        action="/admin/categories/new",
        values={"order": next_order, "type": "individual"},
        notices=notices,
    )


@router.post("/new")
async def create_category(
    request: Request,
    categories: Annotated[CategoryService, Depends(get_category_service)],
    _: Annotated[AdminSession, Depends(require_admin)],
):
    form_data = await request.form()
    values = _form_values({k: v for k, v in form_data.items() if isinstance(v, str)})
    try:
        form = validate_form(CategoryForm, values)
        await categories.create(form)
    except AdminError as e:
        return _render_form(
            request,
            action="/admin/categories/new",
            values=values,
            errors=e.details.get("fields", {}),
            notices=[Notice.from_error("Error", e)],
            status_code=e.http_status,
        )
    return RedirectResponse(url="/admin/categories?done=created", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{category_id}/edit", response_class=HTMLResponse)
async def edit_category(
    request: Request,
    category_id: str,
    categories: Annotated[CategoryService, Depends(get_category_service)],
    _: Annotated[AdminSession, Depends(require_admin)],
):
    try:
        record = await categories.get(category_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    return _render_form(
        request,
        action=f"/admin/categories/{category_id}/edit",
        values=record.model_dump(),
    )


@router.post("/{category_id}/edit")
async def update_category(
    request: Request,
    category_id: str,
    categories: Annotated[CategoryService, Depends(get_category_service)],
    _: Annotated[AdminSession, Depends(require_admin)],
):
    form_data = await request.form()
    values = _form_values({k: v for k, v in form_data.items() if isinstance(v, str)})
    action = f"/admin/categories/{category_id}/edit"
    try:
        form = validate_form(CategoryForm, values)
        await categories.update(category_id, form)
    except AdminError as e:
        return _render_form(
            request,
            action=action,
            values=values,
            errors=e.details.get("fields", {}),
            notices=[Notice.from_error("Error", e)],
            status_code=e.http_status,
        )
    return RedirectResponse(url="/admin/categories?done=updated", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/{category_id}/delete")
async def delete_category(
    request: Request,
    category_id: str,
    categories: Annotated[CategoryService, Depends(get_category_service)],
    _: Annotated[AdminSession, Depends(require_admin)],
    confirmed: Annotated[bool, Form()] = False,
):
    """Delete a category once the admin has confirmed."""
    try:
        deleted = await categories.delete(category_id, confirmed)
    except AdminError as e:
        logger.error(f"Deleting category {category_id} failed: {e.message}")
        records = []
        try:
            records = await categories.list_categories()
        except AdminError:
            logger.exception("Reloading categories after failed delete also failed")
        return templates.TemplateResponse(
            request,
            "categories.html",
            {"categories": records, "notices": [Notice.from_error("Error", e)]},
            status_code=e.http_status,
        )
    url = "/admin/categories?done=deleted" if deleted else "/admin/categories"
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)
