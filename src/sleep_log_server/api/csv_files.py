"""CSV import and export endpoints.

Import accepts either a raw ``text/csv`` (or ``text/plain``) body or a
multipart form with the file in the ``file`` field.
"""

from typing import Any

from litestar import Request, Router, get, post
from litestar.datastructures import UploadFile
from litestar.exceptions import ValidationException
from litestar.response import Response
from litestar.status_codes import HTTP_200_OK

from sleep_log_server.core.auth import CurrentAuth
from sleep_log_server.core.config import settings
from sleep_log_server.core.database import DbSession
from sleep_log_server.services.csv_export import build_export_csv, export_filename
from sleep_log_server.services.csv_import import CsvImportService
from sleep_log_server.services.sleep_logs import SleepLogService


async def read_csv_payload(request: Request[Any, Any, Any]) -> str:
    """Read the uploaded CSV as text.

    Raises:
        ValidationException: If the file field is missing, the payload is too
            large or it is not valid UTF-8
    """
    content_type = request.headers.get("Content-Type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise ValidationException("Multipart upload must contain a 'file' field")
        raw = await upload.read()
    else:
        raw = await request.body()

    if len(raw) > settings.max_import_bytes:
        raise ValidationException(
            f"CSV payload too large (max {settings.max_import_bytes} bytes)"
        )

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationException("CSV payload must be UTF-8 encoded") from exc


@post("/import", status_code=HTTP_200_OK)
async def import_csv(
    request: Request[Any, Any, Any],
    auth: CurrentAuth,
    session: DbSession,
) -> dict[str, Any]:
    """Import sleep logs from CSV into the caller's records.

    Bad rows are reported, not fatal; duplicates of existing dates are skipped.

    Returns:
        ``{"message", "success_count", "skip_count", "error_count", "errors"}``

    Example:
        curl -X POST -H "Authorization: Bearer $TOKEN" \\
             -F file=@sleep.csv http://localhost:8000/api/csv/import
    """
    text = await read_csv_payload(request)
    outcome = await CsvImportService(session).import_csv(text, auth.user_id)
    return outcome.to_dict()


@get("/export", status_code=HTTP_200_OK)
async def export_csv(auth: CurrentAuth, session: DbSession) -> Response[bytes]:
    """Download all of the caller's sleep logs as CSV, oldest first."""
    sleep_logs = await SleepLogService(session).list_all(auth.user_id)

    return Response(
        content=build_export_csv(sleep_logs).encode("utf-8"),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


csv_router = Router(path="/csv", route_handlers=[import_csv, export_csv])
