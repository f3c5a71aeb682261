"""
Defensive post-processing of model output
Models ignore formatting instructions often enough that every caller
cleans the raw text before using it.
"""

import json
import re
from typing import Any, Dict, List, Optional

from loguru import logger


_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*")


def strip_code_fences(text: Optional[str]) -> str:
    """Remove ```json / ``` markers and surrounding whitespace"""
    if not text:
        return ""
    return _FENCE_PATTERN.sub("", text).strip()


def split_variants(text: Optional[str], delimiter: str = "|||") -> List[str]:
    """
    Split generated variants on a delimiter
    
    Output without the delimiter becomes a single variant.
    
    Example:
        >>> split_variants("Cozy loft ||| Sunny studio")
        ['Cozy loft', 'Sunny studio']
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return []
    return [part.strip() for part in cleaned.split(delimiter) if part.strip()]


def lower_keys(value: Any) -> Any:
    """Recursively lower-case dict keys for case-insensitive matching"""
    if isinstance(value, dict):
        return {str(k).lower(): lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [lower_keys(item) for item in value]
    return value


def parse_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object out of model output
    
    Tolerates code fences and prose around the object.
    
    Returns:
        dict with lower-cased keys, or None if nothing parseable was found
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return None
    
    candidates = [cleaned]
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        candidates.append(cleaned[start:end + 1])
    
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return lower_keys(parsed)
    
    logger.warning(f"Could not parse JSON object from model output: {cleaned[:80]}...")
    return None
