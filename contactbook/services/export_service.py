"""Contact export to xlsx and CSV."""

import csv
import io
import logging
from datetime import UTC, datetime
from typing import Any

from openpyxl import Workbook

from contactbook.models.contact import Contact
from contactbook.services.contact_service import ContactService

logger = logging.getLogger(__name__)

SHEET_NAME = "Contacts"

# (header, model attribute) in output order
EXPORT_COLUMNS = [
    ("name", "name"),
    ("email", "email"),
    ("phone", "phone"),
    ("address", "address"),
    ("category", "category"),
    ("isFavorite", "is_favorite"),
    ("notes", "notes"),
    ("lastContacted", "last_contacted"),
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"


def export_filename(owner_id: int, ext: str, now: datetime | None = None) -> str:
    """Attachment name: contacts_<userId>_<epoch millis>.<ext>."""
    now = now or datetime.now(UTC)
    return f"contacts_{owner_id}_{int(now.timestamp() * 1000)}.{ext}"


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _xlsx_value(value: Any) -> Any:
    if isinstance(value, datetime):
        # Excel cells cannot hold timezone-aware datetimes
        if value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value
    if isinstance(value, str):
        # StrEnum members become plain strings
        return str(value)
    return value


class ContactExporter:
    """Materializes an owner's full contact set. Read-only."""

    def __init__(self, contact_service: ContactService):
        self.contact_service = contact_service

    def _rows(self, owner_id: int) -> list[list[Any]]:
        contacts: list[Contact] = self.contact_service.all_contacts(owner_id)
        return [[getattr(contact, attr) for _, attr in EXPORT_COLUMNS] for contact in contacts]

    def export_spreadsheet(self, owner_id: int) -> bytes:
        """Build an xlsx workbook with a single "Contacts" sheet."""
        rows = self._rows(owner_id)

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_NAME
        sheet.append([header for header, _ in EXPORT_COLUMNS])
        for row in rows:
            sheet.append([_xlsx_value(value) for value in row])

        buffer = io.BytesIO()
        workbook.save(buffer)
        logger.info(f"Exported {len(rows)} contacts to xlsx for user {owner_id}")
        return buffer.getvalue()

    def export_csv(self, owner_id: int) -> str:
        """Render contacts as CSV with a header row and minimal quoting."""
        rows = self._rows(owner_id)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL)
        writer.writerow([header for header, _ in EXPORT_COLUMNS])
        for row in rows:
            writer.writerow([_csv_value(value) for value in row])

        logger.info(f"Exported {len(rows)} contacts to csv for user {owner_id}")
        return buffer.getvalue()
