"""Load form definitions from YAML or JSON files.

A definition is either a mapping with a ``pages`` list (optionally a
``title``) or a bare list of pages, in the same camelCase shape the
editor saves.  JSON is a subset of YAML, so both go through
``yaml.safe_load``.

Usage::

    form = load_form("fixtures/survey.yaml")
    result = build_flow(form.pages)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from canova_flow.models.form import Form

logger = logging.getLogger(__name__)


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML (or JSON) file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing form file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_form(data: Any) -> Form:
    """Turn parsed YAML/JSON into a :class:`Form`.

    Raises ``ValueError`` for documents that are neither a mapping nor a
    list of pages (pydantic's ``ValidationError`` is a ``ValueError`` too).
    """
    if isinstance(data, list):
        data = {"pages": data}
    if not isinstance(data, dict):
        raise ValueError(f"Form definition must be a mapping or a list of pages, got {type(data).__name__}")
    return Form.model_validate(data)


def load_form(path: Path | str) -> Form:
    """Read and validate a form definition file."""
    form = parse_form(load_yaml(path))
    logger.info("Loaded form %r with %d pages from %s", form.title, len(form.pages), path)
    return form
