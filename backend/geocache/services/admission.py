from __future__ import annotations
import asyncio
from typing import Any
from uuid import UUID
import structlog

from geocache.config import settings
from geocache.errors import AuthorizationError, ValidationError, SafetyRejectedError, InfrastructureError
from geocache.schemas.cache import CacheCandidate, CacheRecord
from geocache.services.geofence import GeofenceChecker
from geocache.services.store import CacheStore
from geocache.services.validator import CacheSubmissionValidator

log = structlog.get_logger()


class CacheAdmissionPipeline:
    """
    validate -> geofence check -> atomic write.

    A submission ends in exactly one of: admitted (pending record returned),
    AuthorizationError, ValidationError, SafetyRejectedError, InfrastructureError.
    Nothing is retried here; retrying is up to the caller.
    """

    def __init__(
        self,
        validator: CacheSubmissionValidator,
        checker: GeofenceChecker,
        store: CacheStore,
        rejection_message: str | None = None,
        timeout: float | None = None,
    ):
        self.validator = validator
        self.checker = checker
        self.store = store
        self.rejection_message = rejection_message or settings.geofence_rejection_message
        self.timeout = timeout

    async def submit(self, raw: Any, owner_id: UUID | str | None) -> CacheRecord:
        owner = _resolve_owner(owner_id)

        try:
            candidate = self.validator.validate(raw)
        except ValidationError as e:
            log.info("cache_rejected_invalid", owner_id=str(owner), fields=sorted(e.violations))
            raise

        try:
            rule_id = await self.checker.violated_rule(candidate.lat, candidate.lng)
        except InfrastructureError as e:
            log.error("cache_admission_failed", owner_id=str(owner), stage=e.stage, cause=repr(e.cause))
            raise
        if rule_id is not None:
            log.info("cache_rejected_unsafe", owner_id=str(owner), rule_id=str(rule_id))
            raise SafetyRejectedError(self.rejection_message, rule_id=rule_id)

        try:
            record = await asyncio.wait_for(self._persist(candidate, owner), self.timeout)
        except asyncio.TimeoutError as e:
            log.error("cache_admission_failed", owner_id=str(owner), stage="persist", cause="timeout")
            raise InfrastructureError("persist timed out", stage="persist") from e
        except Exception as e:
            log.error("cache_admission_failed", owner_id=str(owner), stage="persist", cause=repr(e))
            raise InfrastructureError(e, stage="persist") from e

        log.info("cache_admitted", cache_id=str(record.id), owner_id=str(owner))
        return record

    async def _persist(self, candidate: CacheCandidate, owner: UUID) -> CacheRecord:
        async with self.store.transaction() as tx:
            record = await tx.insert_cache(candidate, owner)
            await tx.write_location(record.id, candidate.lat, candidate.lng)
        return record


def _resolve_owner(owner_id: UUID | str | None) -> UUID:
    if owner_id is None or owner_id == "":
        log.info("cache_rejected_unauthorized")
        raise AuthorizationError()
    if isinstance(owner_id, UUID):
        return owner_id
    try:
        return UUID(str(owner_id))
    except ValueError:
        log.info("cache_rejected_unauthorized")
        raise AuthorizationError("malformed owner identity") from None
