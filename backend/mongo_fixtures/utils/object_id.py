"""ObjectId helpers for fixture authors.

Fixtures often pre-assign `_id` values so documents in one collection can
reference documents in another:

    from mongo_fixtures import create_object_id

    STERLING_ID = create_object_id("4eca80fae4af59f55d000020")

    archer = [{"_id": STERLING_ID, "name": "Sterling"}]
    missions = [{"agent": STERLING_ID, "codename": "Duchess"}]
"""

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from mongo_fixtures.exceptions import (
    InvalidArgumentTypeError,
    InvalidIdentifierFormatError,
)


def create_object_id(value: ObjectId | str | None = None) -> ObjectId:
    """
    Create a MongoDB ObjectId.

    Args:
        value: None to generate a fresh id, an existing ObjectId to clone,
            or a 24-character hex string to parse. Hex digits are accepted in
            either case; the returned id always renders as lowercase hex.

    Returns:
        A new ObjectId instance (never the same object as `value`).

    Raises:
        InvalidIdentifierFormatError: If `value` is a malformed string.
        InvalidArgumentTypeError: If `value` has any other type.
    """
    if value is None:
        return ObjectId()

    if isinstance(value, ObjectId):
        return ObjectId(str(value))

    if isinstance(value, str):
        # ObjectId also accepts 12-byte strings; only the hex form is canonical
        if len(value) != 24:
            raise InvalidIdentifierFormatError(
                f"'{value}' is not a valid ObjectId, it must be a 24-character hex string"
            )
        try:
            return ObjectId(value)
        except InvalidId as e:
            raise InvalidIdentifierFormatError(str(e)) from e

    raise InvalidArgumentTypeError(
        f"ObjectId must be created from None, an ObjectId or a string, not {type(value).__name__}"
    )


def is_object_id(value: Any) -> bool:
    """Check whether a value is an ObjectId or a 24-character hex string."""
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)
