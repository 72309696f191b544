from __future__ import annotations

import json

from pydantic import ValidationError

from .errors import AppFileError
from .models import ApplicationSpec


def read_app(path: str) -> ApplicationSpec:
    """Load a Marathon app definition (JSON) from disk.

    Only the presence of ``id`` is checked; everything else goes to Marathon
    as written.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise AppFileError(path, "file not found") from e
    except OSError as e:
        raise AppFileError(path, f"{type(e).__name__}: {e}") from e
    except json.JSONDecodeError as e:
        raise AppFileError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AppFileError(path, f"expected a JSON object, got {type(data).__name__}")
    try:
        return ApplicationSpec.model_validate(data)
    except ValidationError as e:
        raise AppFileError(path, "app definition needs a string 'id'") from e
