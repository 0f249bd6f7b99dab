"""YAML reading and JSON-schema validation shared by settings and the rooms file."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from castpair.core.errors import CastpairError


class DuplicateKeyError(yaml.YAMLError):
    """Raised by :class:`UniqueKeyLoader` on a repeated mapping key."""


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise DuplicateKeyError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@lru_cache(maxsize=None)
def load_schema_validator(name: str) -> Any:
    schema_text = resources.files("castpair.schemas").joinpath(name).read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def schema_errors(doc: Any, schema_name: str) -> str | None:
    """Return a readable description of the first schema violation, if any."""
    try:
        load_schema_validator(schema_name).validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        return f"{exc.message}{where}"
    return None


def read_yaml(path: Path, *, error_cls: type[CastpairError]) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise error_cls(f"Could not read {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise error_cls(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise error_cls(f"{path} must contain a mapping at root")
    return loaded


def validate_document(doc: Any, schema_name: str, source: Path | str, *, error_cls: type[CastpairError]) -> None:
    problem = schema_errors(doc, schema_name)
    if problem:
        raise error_cls(f"Schema validation failed for {source}: {problem}")
