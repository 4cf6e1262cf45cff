"""Import and export of single saved projects as JSON files."""
from __future__ import annotations

import json
import re
import unicodedata
from dataclasses import dataclass
from typing import Union

from pydantic import ValidationError as PydanticValidationError

from plans.models import SavedPlan
from shared.errors import ImportFormatError

IMPORTED_SUFFIX = " (importado)"


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    content: bytes
    media_type: str = "application/json"


def slugify(name: str) -> str:
    """ASCII, lowercase, underscore-separated version of a project name."""
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", normalized).strip("_").lower()
    return slug or "proyecto"


def export_filename(project: SavedPlan) -> str:
    return f"plan_{slugify(project.name)}_{project.id}.json"


def export_project(project: SavedPlan) -> ExportedFile:
    """Serialize a stored project verbatim as indented UTF-8 JSON."""
    content = json.dumps(project.to_record(), ensure_ascii=False, indent=2).encode("utf-8")
    return ExportedFile(filename=export_filename(project), content=content)


def decode_project(data: Union[bytes, str]) -> SavedPlan:
    """Validate an imported file and return it as a SavedPlan.

    Raises:
        ImportFormatError: if the payload is not JSON, not an object, or
            lacks a usable ``id`` or ``plan``.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError("El archivo no está codificado en UTF-8.") from e
    if not data.strip():
        raise ImportFormatError("El archivo está vacío.")
    try:
        payload = json.loads(data)
    except ValueError as e:
        raise ImportFormatError("El archivo no contiene JSON válido.") from e
    if not isinstance(payload, dict):
        raise ImportFormatError()
    missing = [field for field in ("id", "plan") if not payload.get(field)]
    if missing:
        raise ImportFormatError(f"Formato de archivo inválido: falta {', '.join(missing)}.")
    payload = {**payload, "id": str(payload["id"])}
    try:
        return SavedPlan.model_validate(payload)
    except PydanticValidationError as e:
        raise ImportFormatError(f"Formato de archivo inválido: {e.error_count()} campo(s) incorrecto(s).") from e


def mark_imported(name: str) -> str:
    base = name.strip() or "Proyecto"
    return f"{base}{IMPORTED_SUFFIX}"
