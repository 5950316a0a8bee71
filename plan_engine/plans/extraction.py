"""Locate a training plan JSON object inside free LLM response text.

Generators often wrap the plan in a fenced code block or surround it with
prose. Extraction returns the raw payload for decode_plan; it does not
normalize anything.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from loguru import logger

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
_RAW_PLAN_RE = re.compile(r"\{[\s\S]*\"meta\"[\s\S]*\"schedule\"[\s\S]*\}")

REQUIRED_META_FIELDS: tuple[str, ...] = ("plan_name", "plan_type", "start_date")


def extract_training_plan_json(text: Any) -> dict[str, Any] | None:
    """Extract and validate a training plan object from response text.

    A fenced ```json block wins; otherwise the widest raw object mentioning
    "meta" and "schedule" is tried.

    Args:
        text: LLM response text

    Returns:
        Parsed plan payload, or None if none was found or it is not a plan
    """
    if not text or not isinstance(text, str):
        return None

    json_string: str | None = None
    block_match = _CODE_BLOCK_RE.search(text)
    if block_match:
        json_string = block_match.group(1)
    else:
        raw_match = _RAW_PLAN_RE.search(text)
        if raw_match:
            json_string = raw_match.group(0)

    if json_string is None:
        logger.debug("No JSON found in response text")
        return None

    try:
        parsed = json.loads(json_string)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing extracted JSON string: {e}. First 500 chars: {json_string[:500]!r}")
        return None

    if not is_valid_training_plan(parsed):
        logger.warning("Extracted JSON does not match training plan structure")
        return None

    logger.info("Extracted training plan JSON from response text")
    return parsed


def is_valid_training_plan(obj: Any) -> bool:
    """Check that an object has the outer shape of a training plan.

    Args:
        obj: Candidate payload

    Returns:
        True if meta has the required fields, schedule is a non-empty list
        and the first week has a days list
    """
    if not isinstance(obj, Mapping):
        return False

    meta = obj.get("meta")
    if not isinstance(meta, Mapping):
        return False
    if not all(meta.get(field) for field in REQUIRED_META_FIELDS):
        return False

    schedule = obj.get("schedule")
    if not isinstance(schedule, list) or not schedule:
        return False

    first_week = schedule[0]
    return isinstance(first_week, Mapping) and isinstance(first_week.get("days"), list)
