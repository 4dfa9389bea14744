# stepdriver/steps.py
"""
@file steps.py
@brief Load an ordered step list from YAML.

Accepted shapes for one step:

    - [click, name, BUTTON, OK]
    - {action: write, args: [id, EDIT, userField, "${USER}"]}

Arguments are strings by contract; YAML numbers and booleans are converted
("true"/"false" for booleans). ${NAME} placeholders are replaced from the
file's `vars` mapping and caller-supplied variables.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from .exceptions import ConfigurationError

_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

DEFAULT_SCHEMA = os.path.join(os.path.dirname(__file__), "schemas", "steps.schema.json")


@dataclass(frozen=True)
class ExecutionStep:
    action: str
    args: Tuple[str, ...]
    index: int = 0

    def __str__(self) -> str:
        return f"{self.action}({', '.join(self.args)})"


def _as_arg(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _substitute(value: str, variables: Dict[str, Any]) -> str:
    def repl(m):
        key = m.group(1)
        if key not in variables:
            return m.group(0)
        return _as_arg(variables[key])

    return _VAR_PATTERN.sub(repl, value)


class StepSource:
    """
    Validates and parses step files against the packaged JSON schema.
    """

    def __init__(self, schema_path: Optional[str] = None):
        self.schema_path = os.path.abspath(schema_path or DEFAULT_SCHEMA)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self._validator = Draft202012Validator(json.load(f))

    def validate(self, document: Any) -> None:
        errors = sorted(self._validator.iter_errors(document), key=lambda e: [str(p) for p in e.path])
        if errors:
            lines = ["Step file schema validation failed:"]
            for e in errors:
                lines.append(f"- {list(e.path)}: {e.message}")
            raise ConfigurationError("\n".join(lines))

    def parse(self, document: Any, variables: Optional[Dict[str, Any]] = None) -> List[ExecutionStep]:
        self.validate(document)
        merged: Dict[str, Any] = dict(document.get("vars") or {})
        merged.update(variables or {})

        steps: List[ExecutionStep] = []
        for index, raw in enumerate(document["steps"], start=1):
            if isinstance(raw, dict):
                action, args = raw["action"], raw.get("args") or []
            else:
                action, args = raw[0], raw[1:]
            steps.append(ExecutionStep(
                action=str(action),
                args=tuple(_substitute(_as_arg(a), merged) for a in args),
                index=index,
            ))
        return steps

    def load(self, path: str, variables: Optional[Dict[str, Any]] = None) -> List[ExecutionStep]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read step file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(document, dict):
            raise ConfigurationError("Step file must be a mapping at root")
        return self.parse(document, variables)


def load_steps(path: str, variables: Optional[Dict[str, Any]] = None) -> List[ExecutionStep]:
    return StepSource().load(path, variables)
