from __future__ import annotations

"""Shared helpers for JSON routes."""

# ==========================================================================
# 1. Imports
# ==========================================================================
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from flask import request
from sqlalchemy.orm import Session
from werkzeug.exceptions import BadRequest

from db import get_session


# ==========================================================================
# 2. Sessions
# ==========================================================================
@contextmanager
def db_session() -> Iterator[Session]:
    """Yield a session that is closed when the request handler finishes."""
    session: Session = get_session()
    try:
        yield session
    finally:
        session.close()


# ==========================================================================
# 3. Request parsing
# ==========================================================================
def json_body() -> Dict[str, Any]:
    """Return the JSON object body, or raise ``BadRequest``."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
