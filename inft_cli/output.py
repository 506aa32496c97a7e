"""
Output rendering for the INFT CLI

Command results print as aligned key/value tables by default, or as JSON
or YAML for scripting. Metadata updates can be shown as a field diff.
"""

import json
import sys
from typing import Any, Iterable, List, Mapping

import yaml
from tabulate import tabulate

OUTPUT_FORMATS = ('table', 'json', 'yaml')

ANSI = {
    'label': '\033[1;36m',
    'muted': '\033[90m',
    'added': '\033[32m',
    'removed': '\033[31m',
    'reset': '\033[0m',
}


def _paint(text: str, style: str, enabled: bool) -> str:
    if not enabled:
        return text
    return f"{ANSI[style]}{text}{ANSI['reset']}"


def _to_serializable(obj: Any) -> Any:
    if hasattr(obj, 'to_dict'):
        return obj.to_dict()
    return str(obj)


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, (Mapping, list, tuple))


class OutputFormatter:
    """Renders command results as a table, JSON or YAML."""

    def __init__(self, format_type: str = 'table', color_output: bool = True):
        """
        Args:
            format_type: One of table, json, yaml
            color_output: Color table labels when stdout is a terminal
        """
        if format_type not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {format_type}")

        self.format_type = format_type
        self.color_output = color_output and sys.stdout.isatty()

    def format(self, data: Any) -> str:
        if self.format_type == 'json':
            return self.render_json(data)
        if self.format_type == 'yaml':
            return self.render_yaml(data)
        return self.render_table(data)

    def render_json(self, data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False, default=_to_serializable)

    def render_yaml(self, data: Any) -> str:
        # Round-trip through JSON so objects with to_dict() serialize safely
        plain = json.loads(json.dumps(data, default=_to_serializable))
        return yaml.safe_dump(plain, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip()

    def render_table(self, data: Any) -> str:
        """
        Key/value table for mappings, one line per item for lists.

        Nested values are shown as compact JSON so that locators, keys and
        capability lists stay copyable from the terminal.
        """
        if isinstance(data, Mapping):
            if not data:
                return "No data available"
            rows = [[_paint(str(key), 'label', self.color_output), self.cell(value)]
                    for key, value in data.items()]
            return tabulate(rows, tablefmt='plain', disable_numparse=True)

        if isinstance(data, (list, tuple)):
            if not data:
                return "No data available"
            return '\n'.join(self.cell(item) for item in data)

        return self.cell(data)

    def cell(self, value: Any) -> str:
        """Render one value for a table cell."""
        if value is None:
            return _paint('null', 'muted', self.color_output)
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, (list, tuple)) and all(_is_scalar(v) for v in value):
            return ', '.join(str(v) for v in value)
        if isinstance(value, (Mapping, list, tuple)):
            return json.dumps(value, separators=(',', ':'), ensure_ascii=False, default=_to_serializable)
        return str(value)


def _diff_value(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)


def _ordered_keys(old: Mapping[str, Any], new: Mapping[str, Any]) -> Iterable[str]:
    yield from old
    yield from (key for key in new if key not in old)


def format_diff(old_data: Mapping[str, Any], new_data: Mapping[str, Any], color: bool = True) -> str:
    """
    Show the fields that differ between two metadata records.

    Keys keep record order; removed values are prefixed '-', added values
    '+'. Unchanged fields are omitted.
    """
    lines: List[str] = []

    for key in _ordered_keys(old_data, new_data):
        in_old, in_new = key in old_data, key in new_data
        if in_old and in_new and old_data[key] == new_data[key]:
            continue
        if in_old:
            lines.append(_paint(f"- {key}: {_diff_value(old_data[key])}", 'removed', color))
        if in_new:
            lines.append(_paint(f"+ {key}: {_diff_value(new_data[key])}", 'added', color))

    return '\n'.join(lines) if lines else "No changes"


__all__ = [
    'OUTPUT_FORMATS',
    'OutputFormatter',
    'format_diff',
]
