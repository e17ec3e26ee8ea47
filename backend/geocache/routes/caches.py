from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geocache.auth_deps import get_current_user_id
from geocache.config import settings
from geocache.db import SessionLocal
from geocache.schemas.cache import CacheOwnerView
from geocache.services.admission import CacheAdmissionPipeline
from geocache.services.geofence import GeofenceChecker, PostgisGeofenceIndex
from geocache.services.public import to_owner
from geocache.services.store import SqlCacheStore
from geocache.services.validator import CacheSubmissionValidator

router = APIRouter(prefix="/caches", tags=["caches"])

def build_pipeline(session_factory: async_sessionmaker[AsyncSession] = SessionLocal) -> CacheAdmissionPipeline:
    timeout = settings.submission_timeout_seconds or None
    return CacheAdmissionPipeline(
        validator=CacheSubmissionValidator(),
        checker=GeofenceChecker(PostgisGeofenceIndex(session_factory), timeout=timeout),
        store=SqlCacheStore(session_factory),
        timeout=timeout,
    )

def get_pipeline() -> CacheAdmissionPipeline:
    return build_pipeline()

@router.post("", status_code=201, response_model=CacheOwnerView)
async def create_cache(
    request: Request,
    owner_id: UUID | None = Depends(get_current_user_id),
    pipeline: CacheAdmissionPipeline = Depends(get_pipeline),
):
    try:
        raw = await request.json()
    except ValueError:
        # unparseable body is reported by the validator like any other bad input
        raw = None
    record = await pipeline.submit(raw, owner_id)
    # owner gets exact coordinates back
    return to_owner(record)
