from __future__ import annotations
from geocache.schemas.cache import CacheRecord, CacheOwnerView, CachePublic
from geocache.services.hints import encode_hint
from geocache.services.rounding import round_coordinates


def to_owner(record: CacheRecord) -> CacheOwnerView:
    return CacheOwnerView(**record.model_dump())


def to_public(record: CacheRecord) -> CachePublic:
    """Anything leaving through an unauthenticated or non-owner path goes through here."""
    lat, lng = round_coordinates(record.lat, record.lng)
    data = record.model_dump()
    data.update(lat=lat, lng=lng, hint=encode_hint(record.hint))
    return CachePublic(**data)
