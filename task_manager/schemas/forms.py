from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from starlette.datastructures import FormData

# Верхняя граница INTEGER в SQLite и BIGINT в Postgres
MAX_ID = 2 ** 63 - 1


def form_value(form: FormData, field: str, default: str = "") -> str:
    """Value of a ``data[<field>]`` form input"""
    value = form.get(f"data[{field}]", default)
    return value if isinstance(value, str) else default


def form_list(form: FormData, field: str) -> List[str]:
    """All values of a multi-select, sent as ``data[<field>]`` or ``data[<field>][]``"""
    values = form.getlist(f"data[{field}]") + form.getlist(f"data[{field}][]")
    return [value for value in values if isinstance(value, str)]


def blank_to_none(value: Any) -> Optional[Any]:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def collect_errors(exc: ValidationError) -> Dict[str, str]:
    """Map pydantic errors to ``{field: message}``, first message per field wins"""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "general"
        if field in errors:
            continue
        ctx_error = (error.get("ctx") or {}).get("error")
        errors[field] = str(ctx_error) if ctx_error is not None else error["msg"]
    return errors
