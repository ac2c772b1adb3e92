"""
Schedule PDF downloads.

GET /api/schedule/pdf                 — customer copy of the live schedule
GET /api/schedule/pdf/vendor/{name}   — one vendor's copy

?archive_id= renders a saved schedule snapshot instead of the live workspace.

Supports auth via:
1. Authorization: Bearer <token> header (standard)
2. ?token=<jwt> query param (for window.open / direct download links)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from .. import models, workspace
from ..auth import get_current_user, security
from ..database import get_db
from ..pdf_generator import (
    generate_customer_schedule_pdf,
    generate_vendor_schedule_pdf,
    schedule_filename,
)
from ..schedule import date_stats, schedule_summary, sort_supplies, vendor_summary

router = APIRouter(prefix="/schedule", tags=["pdf"])


def _pdf_user(
    token: Optional[str] = Query(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> models.User:
    """Header auth, or ?token= for download links opened in a new tab."""
    if token and credentials is None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
    return get_current_user(credentials, db)


def _load_schedule(archive_id: Optional[int], db: Session):
    """(po_details, vendors, supplies) from an archive or the live workspace."""
    if archive_id is None:
        return (
            workspace.load(db, "po_details"),
            workspace.load(db, "vendors"),
            workspace.load(db, "supplies"),
        )

    archive = db.query(models.Archive).filter(models.Archive.id == archive_id).first()
    if not archive:
        raise HTTPException(status_code=404, detail="Archive not found")
    if archive.type != models.ArchiveType.SCHEDULE.value:
        raise HTTPException(status_code=400, detail="Archive is not a supply schedule")
    data = archive.data or {}
    return (
        data.get("po_details") or {},
        data.get("vendors") or [],
        sort_supplies(data.get("supplies") or []),
    )


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/pdf")
def download_customer_pdf(
    archive_id: Optional[int] = None,
    current_user: models.User = Depends(_pdf_user),
    db: Session = Depends(get_db),
):
    po_details, _, supplies = _load_schedule(archive_id, db)
    summary = schedule_summary(po_details, supplies)
    content = generate_customer_schedule_pdf(po_details, supplies, summary)
    return _pdf_response(content, schedule_filename(po_details.get("customer_name")))


@router.get("/pdf/vendor/{name}")
def download_vendor_pdf(
    name: str,
    archive_id: Optional[int] = None,
    current_user: models.User = Depends(_pdf_user),
    db: Session = Depends(get_db),
):
    po_details, vendors, supplies = _load_schedule(archive_id, db)
    if not any(a.get("name") == name for a in vendors):
        raise HTTPException(status_code=404, detail=f"Vendor '{name}' not found")
    stats = vendor_summary(vendors, supplies, name)
    content = generate_vendor_schedule_pdf(po_details, stats, date_stats(supplies))
    return _pdf_response(content, schedule_filename(name))
