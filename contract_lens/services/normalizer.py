"""Turn raw model output into validated models.

Model output goes through four steps: code fences are stripped, the rest is
parsed as JSON, page numbers are clamped to at least 1, and the result is
validated against a pydantic schema in strict mode. Any failure raises
MalformedResponse; apart from the page clamp nothing is defaulted.
"""

import json
import logging
import re
from typing import Any, Iterator, Type, TypeVar

from pydantic import BaseModel, ValidationError

from contract_lens.exceptions import MalformedResponse, truncate_sample
from contract_lens.models.analysis import ContractAnalysis
from contract_lens.models.chat import ChatAnswer

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL | re.IGNORECASE)

# Paths to objects carrying a "page" field; "*" steps into every list item
_PAGE_HOLDERS: dict[type, tuple[tuple[str, ...], ...]] = {
    ContractAnalysis: (
        ("risk_summary", "top_risks", "*"),
        ("clauses", "*", "evidence", "*"),
    ),
    ChatAnswer: (
        ("citations", "*"),
    ),
}


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` or ```json fence, if present."""
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def _clamp_page(value: Any) -> Any:
    if value is None:
        return 1
    # bool is an int subclass; leave it for the validator to reject
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    page = max(1, value or 1)
    if isinstance(page, float) and page.is_integer():
        page = int(page)
    return page


def _holders(node: Any, path: tuple[str, ...]) -> Iterator[dict]:
    if not path:
        if isinstance(node, dict):
            yield node
        return
    head, rest = path[0], path[1:]
    if head == "*":
        if isinstance(node, list):
            for item in node:
                yield from _holders(item, rest)
    elif isinstance(node, dict) and head in node:
        yield from _holders(node[head], rest)


def repair_page_numbers(data: Any, schema: Type[BaseModel] = ContractAnalysis) -> Any:
    """Clamp every page reference known to schema to >= 1, in place.

    Missing, null, zero and negative pages become 1.
    """
    for path in _PAGE_HOLDERS.get(schema, ()):
        for holder in _holders(data, path):
            holder["page"] = _clamp_page(holder.get("page"))
    return data


def _format_violation(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "(root)"
    return f"{location}: {error.get('msg', 'invalid value')}"


def parse_json(raw_text: str) -> Any:
    """Strip fences and parse. Raises MalformedResponse(stage="parse")."""
    cleaned = strip_code_fences(raw_text or "")
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        logger.warning(f"Failed to parse model JSON: {e}\nRaw: {truncate_sample(cleaned)}")
        raise MalformedResponse(stage="parse", raw=cleaned, message=f"Model output is not valid JSON: {e}")


def validate(data: Any, schema: Type[ModelT], raw_text: str = "") -> ModelT:
    """Strict schema check reporting every violated field."""
    try:
        return schema.model_validate_json(json.dumps(data), strict=True)
    except ValidationError as e:
        violations = [_format_violation(err) for err in e.errors()]
        logger.warning(f"Model output failed validation ({len(violations)} violations): {violations}")
        raise MalformedResponse(stage="validate", violations=violations, raw=raw_text)


def normalize(raw_text: str, schema: Type[ModelT] = ContractAnalysis) -> ModelT:
    """Parse, repair and validate raw model text into schema."""
    data = parse_json(raw_text)
    repair_page_numbers(data, schema)
    return validate(data, schema, raw_text=raw_text)
