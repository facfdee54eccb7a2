"""Declarative rule definitions.

Builds RuleSets from plain mappings, and from TOML files holding one
``[[rule]]`` table per rule:

    [[rule]]
    id = "todo-marker"
    kind = "regex"
    pattern = '\\b(?P<tag>TODO|FIXME)\\b'
    message = "Unresolved {tag}"
    severity = "warning"

    [[rule]]
    id = "long-line"
    kind = "line-length"
    max_length = 100

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .rules import KeywordRule, LineLengthRule, PatternRule, RegexRule, RuleSet

__all__ = [
    "RuleSetLoader",
    "rule_from_mapping",
    "rules_from_mapping",
]

logger = logging.getLogger(__name__)

_COMMON_KEYS = frozenset({"id", "kind", "message", "severity", "synthesis"})

_KIND_KEYS: dict[str, frozenset[str]] = {
    "regex": frozenset({"pattern", "group", "flags", "confidence"}),
    "keywords": frozenset({"keywords", "case_sensitive", "confidence"}),
    "line-length": frozenset({"max_length"}),
}

_REGEX_FLAGS: dict[str, re.RegexFlag] = {
    "ignorecase": re.IGNORECASE,
    "multiline": re.MULTILINE,
    "dotall": re.DOTALL,
    "verbose": re.VERBOSE,
    "ascii": re.ASCII,
}


def _require(definition: Mapping[str, Any], key: str, rule_id: str) -> Any:
    if key not in definition:
        msg = f"Rule '{rule_id}' definition is missing '{key}'"
        raise ValueError(msg)
    return definition[key]


def _regex_flags(names: object, rule_id: str) -> int:
    if not isinstance(names, list):
        msg = f"Rule '{rule_id}' flags must be a list of names, got {names!r}"
        raise ValueError(msg)
    flags = 0
    for name in names:
        flag = _REGEX_FLAGS.get(str(name).lower())
        if flag is None:
            msg = f"Rule '{rule_id}' has unknown regex flag {name!r}"
            raise ValueError(msg)
        flags |= flag
    return flags


def rule_from_mapping(definition: Mapping[str, Any]) -> PatternRule:
    """Build one rule from a declarative definition.

    Args:
        definition: Mapping with ``id``, ``kind`` and kind-specific keys

    Returns:
        The configured rule

    Raises:
        ValueError: Unknown kind, unknown or missing keys, or any value the
            rule constructor rejects
    """
    if not isinstance(definition, Mapping):
        msg = f"Rule definition must be a mapping, got {type(definition).__name__}"
        raise ValueError(msg)
    rule_id = definition.get("id")
    if not isinstance(rule_id, str) or not rule_id.strip():
        msg = f"Rule definition has no usable 'id': {definition.get('id')!r}"
        raise ValueError(msg)
    kind = definition.get("kind", "regex")
    allowed = _KIND_KEYS.get(kind) if isinstance(kind, str) else None
    if allowed is None:
        msg = f"Rule '{rule_id}' has unknown kind {kind!r} (expected one of {sorted(_KIND_KEYS)})"
        raise ValueError(msg)
    unknown = set(definition) - _COMMON_KEYS - allowed
    if unknown:
        msg = f"Rule '{rule_id}' has unknown key(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    common: dict[str, Any] = {
        key: definition[key] for key in ("message", "severity", "synthesis") if key in definition
    }
    try:
        match kind:
            case "regex":
                return RegexRule(
                    rule_id,
                    _require(definition, "pattern", rule_id),
                    group=definition.get("group", 0),
                    flags=_regex_flags(definition.get("flags", []), rule_id),
                    confidence=definition.get("confidence", 1.0),
                    **common,
                )
            case "keywords":
                keywords = _require(definition, "keywords", rule_id)
                if isinstance(keywords, str) or not isinstance(keywords, Iterable):
                    msg = f"Rule '{rule_id}' keywords must be a list of strings"
                    raise ValueError(msg)
                return KeywordRule(
                    rule_id,
                    keywords,
                    case_sensitive=bool(definition.get("case_sensitive", False)),
                    confidence=definition.get("confidence", 1.0),
                    **common,
                )
            case _:
                return LineLengthRule(
                    rule_id, _require(definition, "max_length", rule_id), **common
                )
    except TypeError as e:
        msg = f"Rule '{rule_id}' definition is invalid: {e}"
        raise ValueError(msg) from e


def rules_from_mapping(definitions: Iterable[Mapping[str, Any]]) -> RuleSet:
    """Build a RuleSet from declarative definitions, in order.

    Raises:
        ValueError: Invalid definition or duplicate id
    """
    return RuleSet(rule_from_mapping(definition) for definition in definitions)


@dataclass(frozen=True, slots=True)
class RuleSetLoader:
    """Loads rule files from a fixed directory.

    Security:
        Rule file names containing "..", absolute paths or leading path
        separators are rejected, and every resolved path is verified to lie
        inside the root directory.

    Example:
        >>> loader = RuleSetLoader("rules")
        >>> rules = loader.load("python.toml")

    Attributes:
        root_dir: Directory holding rule files
    """

    root_dir: str | Path
    _resolved_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_resolved_root", Path(self.root_dir).resolve())

    @staticmethod
    def _validate_name(name: str) -> None:
        """Validate a rule file name for path traversal.

        Raises:
            ValueError: If name is empty or contains unsafe path components
        """
        if not name or name.strip() != name:
            msg = f"Rule file name is empty or padded with whitespace: {name!r}"
            raise ValueError(msg)
        if Path(name).is_absolute() or name.startswith(("/", "\\")):
            msg = f"Absolute paths not allowed in rule file name: '{name}'"
            raise ValueError(msg)
        if ".." in name:
            msg = f"Path traversal sequences not allowed in rule file name: '{name}'"
            raise ValueError(msg)

    @staticmethod
    def _is_safe_path(base_dir: Path, full_path: Path) -> bool:
        try:
            full_path.resolve().relative_to(base_dir.resolve())
            return True
        except ValueError:
            return False

    def path_for(self, name: str) -> Path:
        """Resolve a rule file name inside the root directory.

        Raises:
            ValueError: If the name escapes the root directory
        """
        self._validate_name(name)
        full_path = self._resolved_root / name
        if not self._is_safe_path(self._resolved_root, full_path):
            msg = f"Rule file '{name}' resolves outside {self._resolved_root}"
            raise ValueError(msg)
        return full_path

    def load(self, name: str) -> RuleSet:
        """Load a TOML rule file.

        Args:
            name: File name relative to the root directory

        Returns:
            RuleSet in file order

        Raises:
            ValueError: Unsafe name, invalid TOML or invalid definitions
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be read
        """
        path = self.path_for(name)
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        definitions = data.get("rule", [])
        if not isinstance(definitions, list):
            msg = f"Rule file '{name}' must use [[rule]] tables"
            raise ValueError(msg)
        rules = rules_from_mapping(definitions)
        logger.debug("Loaded %d rule(s) from %s", len(rules), path)
        return rules

    def load_all(self, names: Iterable[str]) -> RuleSet:
        """Load several rule files into one RuleSet, in order.

        Raises:
            ValueError: On the first invalid file, or duplicate ids across files
        """
        combined = RuleSet()
        for name in names:
            combined.extend(self.load(name))
        return combined
