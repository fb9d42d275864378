"""
Generate themed highway shield SVGs.

Shield templates live in sprites/templates and use ${name} placeholders
(string.Template syntax). Each shield kind has a fixed set of fields; a
value missing from the basemap theme falls back to the defaults below.
A template placeholder outside the kind's field set means template and
theme have drifted apart, and is raised as a TemplateError.
"""

import math
import re
from string import Template
from typing import Any, Dict, Mapping, Optional

from .errors import TemplateError

SHIELD_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'interstate': {
        'upperBackground': '#2a3444',
        'lowerBackground': '#1e2530',
        'strokeColor': '#4a5a6a',
        'strokeWidth': 2,
    },
    'usHighway': {
        'background': '#1e2530',
        'strokeColor': '#4a5a6a',
        'strokeWidth': 3,
    },
    'stateHighway': {
        'background': '#1a2433',
        'strokeColor': '#3a4a5c',
        'strokeWidth': 2,
    },
}

# Colors and numbers only: no quotes, angle brackets or ampersands
ATTRIBUTE_VALUE = re.compile(r"[#\w.,%() -]+")


def format_value(value: Any) -> str:
    """
    Render a theme value as SVG attribute text (2.0 -> '2', 2.5 -> '2.5').

    Only numbers and plain color tokens (#rrggbb, names, rgb()/rgba()) are
    accepted; anything that could break out of an attribute is rejected.
    """
    if isinstance(value, bool):
        raise TemplateError(f"Boolean is not a valid shield attribute value: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise TemplateError(f"Not a finite number: {value!r}")
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if not isinstance(value, str) or not ATTRIBUTE_VALUE.fullmatch(value):
        raise TemplateError(f"Not a plain color or number: {value!r}")
    return value


def shield_parameters(kind: str, style: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
    """
    Merge a theme style over the kind's defaults.

    Only the kind's own fields are taken from the style; null values fall
    back to the default.
    """
    if kind not in SHIELD_DEFAULTS:
        raise TemplateError(f"Unknown shield kind: {kind!r}")
    style = style or {}
    params = {}
    for key, default in SHIELD_DEFAULTS[kind].items():
        value = style.get(key)
        try:
            params[key] = format_value(default if value is None else value)
        except TemplateError as e:
            raise TemplateError(f"{kind}.{key}: {e}") from e
    return params


def generate_shield_svg(kind: str, style: Optional[Mapping[str, Any]], template_text: str) -> str:
    """
    Substitute theme colors and stroke width into a shield template.

    Args:
        kind: One of 'interstate', 'usHighway', 'stateHighway'
        style: The kind's block from the basemap theme (may be None)
        template_text: Template SVG with ${field} placeholders

    Returns:
        SVG document text with every placeholder replaced

    Raises:
        TemplateError: unknown kind, unknown placeholder or malformed placeholder
    """
    params = shield_parameters(kind, style)
    try:
        return Template(template_text).substitute(params)
    except KeyError as e:
        raise TemplateError(
            f"Template for {kind} shield uses unknown placeholder {e.args[0]!r} "
            f"(expected one of: {', '.join(sorted(params))})"
        ) from e
    except ValueError as e:
        raise TemplateError(f"Malformed placeholder in {kind} shield template: {e}") from e
