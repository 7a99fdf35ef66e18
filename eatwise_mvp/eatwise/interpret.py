"""Turn raw model output into a validated AnalysisReport.

Small models wrap the JSON in prose, leave keys unquoted and keep trailing commas.
We cut out the first '{' .. last '}' span and parse it; only when that fails are the
repair transforms below run in order before a second parse. Then every field is
validated. Anything that does not survive all of that becomes
the fixed fallback report: interpret() never raises.
"""
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from jsonschema import ValidationError, validate

from .report import NO_ALLERGEN, AnalysisReport, fallback_report
from .schemas import ANALYSIS_REPORT_SCHEMA

logger = logging.getLogger(__name__)


def locate_json_span(raw: str) -> Optional[str]:
    # first '{' to last '}' (can over-capture trailing JSON-looking prose)
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end < start:
        return None
    return raw[start:end + 1]


def _strip_line_breaks(s: str) -> str:
    """Raw newlines inside string values make json.loads reject the document."""
    return re.sub(r"\r\n|\n|\r", "", s)


# A complete double-quoted JSON string; matched first so transforms leave it untouched.
_STRING = r'"(?:\\.|[^"\\])*"'

_BARE_KEY = re.compile(_STRING + r'|([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:')
_TRAILING_COMMA = re.compile(_STRING + r'|,\s*([}\]])')


def _quote_bare_keys(s: str) -> str:
    """`{name: "Salt"}` -> `{"name": "Salt"}`.

    Only identifiers right after '{' or ',' outside string literals are touched, so
    `"Mostly safe, note: high sugar"` stays as is.
    """
    def _sub(m):
        if m.group(1) is None:
            return m.group(0)
        return f'{m.group(1)}"{m.group(2)}":'
    return _BARE_KEY.sub(_sub, s)


def _drop_trailing_commas(s: str) -> str:
    """`[1, 2,]` / `{"a": 1,}` -> `[1, 2]` / `{"a": 1}`, outside string literals."""
    return _TRAILING_COMMA.sub(lambda m: m.group(0) if m.group(1) is None else m.group(1), s)


REPAIRS: List[Tuple[str, Callable[[str], str]]] = [
    ("strip_line_breaks", _strip_line_breaks),
    ("quote_bare_keys", _quote_bare_keys),
    ("drop_trailing_commas", _drop_trailing_commas),
]


def repair_json(span: str) -> str:
    for _, fn in REPAIRS:
        span = fn(span)
    return span


def validate_payload(data: Any) -> Dict[str, Any]:
    """Schema check plus the cross-field rules jsonschema does not express."""
    validate(instance=data, schema=ANALYSIS_REPORT_SCHEMA)

    errors: List[str] = []
    if not data["summary"].strip():
        errors.append("summary is blank")
    for i, row in enumerate(data["ingredients"]):
        if not row["name"].strip():
            errors.append(f"ingredients[{i}].name is blank")
        allergen = row["allergenInfo"]
        if not allergen["isAllergen"] and allergen["allergenType"] != NO_ALLERGEN:
            errors.append(
                f"ingredients[{i}].allergenInfo.allergenType must be {NO_ALLERGEN!r} "
                f"when isAllergen is false: {allergen['allergenType']!r}"
            )
    for i, rec in enumerate(data["recommendations"]):
        if not rec.strip():
            errors.append(f"recommendations[{i}] is blank")
    if errors:
        head = errors[:10]
        more = "" if len(errors) <= 10 else f" (+{len(errors) - 10} more)"
        raise ValueError("Invalid analysis payload: " + " | ".join(head) + more)
    return data


def interpret(raw_model_output: str) -> AnalysisReport:
    try:
        span = locate_json_span(raw_model_output or "")
        if span is None:
            logger.warning("model output has no JSON object; using fallback")
            return fallback_report()

        try:
            data = json.loads(span)
        except json.JSONDecodeError:
            data = json.loads(repair_json(span))
        return AnalysisReport.from_dict(validate_payload(data))

    except json.JSONDecodeError as e:
        logger.warning("model output is not parseable after repair: %s", e)
    except ValidationError as e:
        logger.warning("model output does not match report schema: %s", e.message)
    except Exception as e:
        logger.warning("model output rejected: %s", e)
    return fallback_report()
