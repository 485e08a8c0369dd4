"""Contact API endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response, status

from contactbook.api.dependencies import (
    get_contact_exporter,
    get_contact_service,
    get_current_user_id,
)
from contactbook.schemas.auth import MessageResponse
from contactbook.schemas.contact import (
    ContactCreate,
    ContactListResponse,
    ContactResponse,
    ContactUpdate,
)
from contactbook.services.contact_service import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_SORT_FIELD,
    ContactService,
)
from contactbook.services.export_service import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    ContactExporter,
    export_filename,
)

router = APIRouter(prefix="/api/v1/contacts", tags=["contacts"])


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


@router.get("", response_model=ContactListResponse)
def list_contacts(
    user_id: Annotated[int, Depends(get_current_user_id)],
    contact_service: Annotated[ContactService, Depends(get_contact_service)],
    page: Annotated[int, Query(ge=1)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_LIMIT,
    sort_by: Annotated[str, Query(alias="sortBy", max_length=50)] = DEFAULT_SORT_FIELD,
    sort_order: Annotated[Literal["asc", "desc"], Query(alias="sortOrder")] = "asc",
    search: Annotated[str, Query(max_length=255)] = "",
):
    """Get the current user's contacts with search, sort and pagination."""
    result = contact_service.list_contacts(
        user_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
    )
    return ContactListResponse(
        contacts=[ContactResponse.model_validate(contact) for contact in result.items],
        total=result.total,
        page=page,
        limit=limit,
    )


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def create_contact(
    contact_data: ContactCreate,
    user_id: Annotated[int, Depends(get_current_user_id)],
    contact_service: Annotated[ContactService, Depends(get_contact_service)],
):
    """Create a new contact."""
    return contact_service.create_contact(user_id, contact_data)


# Export routes are registered before /{contact_id} so "export" is never read as an ID.
@router.get("/export/excel")
def export_excel(
    user_id: Annotated[int, Depends(get_current_user_id)],
    exporter: Annotated[ContactExporter, Depends(get_contact_exporter)],
):
    """Download all contacts as an xlsx workbook."""
    content = exporter.export_spreadsheet(user_id)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment(export_filename(user_id, "xlsx")),
    )


@router.get("/export/csv")
def export_csv(
    user_id: Annotated[int, Depends(get_current_user_id)],
    exporter: Annotated[ContactExporter, Depends(get_contact_exporter)],
):
    """Download all contacts as CSV."""
    content = exporter.export_csv(user_id)
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers=_attachment(export_filename(user_id, "csv")),
    )


@router.get("/{contact_id}", response_model=ContactResponse)
def get_contact(
    contact_id: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    contact_service: Annotated[ContactService, Depends(get_contact_service)],
):
    """Get a specific contact."""
    return contact_service.get_contact(contact_id, user_id)


@router.put("/{contact_id}", response_model=ContactResponse)
def update_contact(
    contact_id: int,
    contact_data: ContactUpdate,
    user_id: Annotated[int, Depends(get_current_user_id)],
    contact_service: Annotated[ContactService, Depends(get_contact_service)],
):
    """Update a contact. Only fields present in the body change."""
    return contact_service.update_contact(contact_id, user_id, contact_data)


@router.delete("/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    contact_service: Annotated[ContactService, Depends(get_contact_service)],
):
    """Delete a contact."""
    contact_service.delete_contact(contact_id, user_id)
    return MessageResponse(message="Contact deleted successfully")
