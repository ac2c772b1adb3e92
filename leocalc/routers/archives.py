import logging
import math
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/archives", tags=["archives"], dependencies=[Depends(get_current_user)])

PAGE_SIZE = 10
ARCHIVE_TYPES = [t.value for t in models.ArchiveType]


def _check_type(archive_type: Optional[str]):
    if archive_type is not None and archive_type not in ARCHIVE_TYPES:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown archive type '{archive_type}'. Use one of: {', '.join(ARCHIVE_TYPES)}",
        )


def _get_archive_or_404(archive_id: int, db: Session) -> models.Archive:
    archive = db.query(models.Archive).filter(models.Archive.id == archive_id).first()
    if not archive:
        raise HTTPException(status_code=404, detail="Archive not found")
    return archive


@router.get("/", response_model=schemas.ArchivePage)
def list_archives(
    archive_type: Optional[str] = Query(None, alias="type"),
    company: Optional[str] = None,
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    """Newest first, PAGE_SIZE per page. Pages past the end come back empty."""
    _check_type(archive_type)
    query = db.query(models.Archive)
    if archive_type:
        query = query.filter(models.Archive.type == archive_type)
    if company:
        query = query.filter(models.Archive.company_name == company)

    total = query.count()
    items = (
        query.order_by(models.Archive.created_at.desc(), models.Archive.id.desc())
        .offset((page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
        .all()
    )
    return {
        "items": items,
        "page": page,
        "total_pages": math.ceil(total / PAGE_SIZE),
        "total": total,
    }


@router.get("/companies", response_model=List[str])
def list_companies(
    archive_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    """Distinct company names, sorted, for the archive filter dropdown."""
    _check_type(archive_type)
    query = db.query(models.Archive.company_name).distinct()
    if archive_type:
        query = query.filter(models.Archive.type == archive_type)
    return sorted(name for (name,) in query.all() if name)


@router.post("/", response_model=schemas.Archive, status_code=201)
def create_archive(archive: schemas.ArchiveCreate, db: Session = Depends(get_db)):
    company = archive.company_name.strip()
    if not company:
        raise HTTPException(status_code=422, detail="Company name is required")

    db_archive = models.Archive(
        type=archive.data.type,
        company_name=company,
        record_name=archive.record_name,
        data=archive.data.model_dump(),
    )
    db.add(db_archive)
    db.commit()
    db.refresh(db_archive)
    logger.info("Archived %s snapshot #%d for %s", db_archive.type, db_archive.id, company)
    return db_archive


@router.get("/{archive_id}", response_model=schemas.Archive)
def get_archive(archive_id: int, db: Session = Depends(get_db)):
    return _get_archive_or_404(archive_id, db)


@router.put("/{archive_id}", response_model=schemas.Archive)
def update_archive(archive_id: int, update: schemas.ArchiveUpdate, db: Session = Depends(get_db)):
    archive = _get_archive_or_404(archive_id, db)
    changes = update.model_dump(exclude_unset=True)
    if "company_name" in changes:
        if not (changes["company_name"] or "").strip():
            raise HTTPException(status_code=422, detail="Company name is required")
        archive.company_name = changes["company_name"].strip()
    if "record_name" in changes:
        archive.record_name = changes["record_name"]
    if update.data is not None:
        archive.type = update.data.type
        archive.data = update.data.model_dump()
    db.commit()
    db.refresh(archive)
    logger.info("Updated archive #%d", archive.id)
    return archive


@router.delete("/{archive_id}")
def delete_archive(archive_id: int, db: Session = Depends(get_db)):
    archive = _get_archive_or_404(archive_id, db)
    db.delete(archive)
    db.commit()
    logger.info("Deleted archive #%d", archive_id)
    return {"ok": True, "deleted": archive_id}
