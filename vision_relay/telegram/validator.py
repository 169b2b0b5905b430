import json
import os
from functools import lru_cache
from typing import Any, Dict

from jsonschema import ValidationError, validate

from vision_relay.errors import MalformedRequestError

# Path: vision_relay/telegram/schemas/
SCHEMA_DIR = os.path.join(
    os.path.dirname(__file__),
    "schemas"
)

UPDATE_SCHEMA = "update.json"


@lru_cache(maxsize=None)
def load_schema(filename: str = UPDATE_SCHEMA) -> Dict[str, Any]:
    """
    Load a JSON schema file shipped with the package.
    """
    path = os.path.join(SCHEMA_DIR, filename)

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def parse_update_body(raw: bytes) -> Dict[str, Any]:
    """
    Decode a webhook body and check the fields we bind against the update schema.

    Only the shape of known fields is checked; unknown fields and updates
    without attachments pass through untouched. A JSON `null` body decodes
    to an empty update.

    Raises:
        MalformedRequestError: body is not JSON, or a known field has the wrong type.
    """
    try:
        data = json.loads(raw or b"")
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedRequestError(f"invalid JSON: {e}") from e

    # a literal `null` body carries no update at all
    if data is None:
        return {}

    try:
        validate(instance=data, schema=load_schema())
    except ValidationError as e:
        raise MalformedRequestError(f"update does not match schema: {e.message}") from e

    return data
