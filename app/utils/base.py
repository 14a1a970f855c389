import re
from typing import Any, Iterable, List, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId


def parse_object_id(value: Any) -> Optional[PydanticObjectId]:
    """Convert a string id to PydanticObjectId, None when it is not a valid ObjectId."""
    if value is None:
        return None
    if isinstance(value, PydanticObjectId):
        return value
    try:
        return PydanticObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def parse_object_ids(values: Iterable[Any]) -> List[PydanticObjectId]:
    """Parse many ids, silently dropping the malformed ones"""
    parsed = []
    for value in values:
        oid = parse_object_id(value)
        if oid is not None and oid not in parsed:
            parsed.append(oid)
    return parsed


def contains_pattern(text: str) -> dict:
    """Case-insensitive literal substring match for a Mongo $regex query"""
    return {"$regex": re.escape(text), "$options": "i"}
