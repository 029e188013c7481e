"""
Attribute definition set and rules-data loader.

Handles loading, validating and saving the ordered set of AttributeDef
objects that a character sheet is computed against.
"""

import json
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .attribute_def import AttributeDef

logger = structlog.get_logger(__name__)

ATTRIBUTE_SETTINGS_TYPE = "attribute_settings"
CURRENT_DATA_VERSION = 4
FACTORY_RESOURCE = "standard_attributes.yaml"


class RulesLoadError(Exception):
    """Raised when there's an error reading a rules-data file."""

    pass


class AttributeValidationError(Exception):
    """Raised when attribute definition data is structurally invalid."""

    pass


class DuplicateAttributeError(AttributeValidationError):
    """Raised when two attribute definitions share an identifier."""

    def __init__(self, attr_id: str) -> None:
        super().__init__(f"Duplicate attribute ID '{attr_id}'")
        self.attr_id = attr_id


class AttributeDefs(Mapping[str, AttributeDef]):
    """
    Read-only, ordered mapping of attribute ID to AttributeDef.

    Construct with AttributeDefs.build(), which rejects duplicate IDs.
    Iteration follows the order the definitions were supplied in.
    """

    __slots__ = ("_defs",)

    def __init__(self, defs: Mapping[str, AttributeDef] | None = None) -> None:
        self._defs: Mapping[str, AttributeDef] = MappingProxyType(dict(defs or {}))

    @classmethod
    def build(cls, definitions: Iterable[AttributeDef]) -> "AttributeDefs":
        """
        Create a definition set from an ordered sequence of definitions.

        Raises:
            DuplicateAttributeError: If two definitions share an ID
        """
        defs: dict[str, AttributeDef] = {}
        for definition in definitions:
            if definition.id in defs:
                raise DuplicateAttributeError(definition.id)
            defs[definition.id] = definition
        return cls(defs)

    def __getitem__(self, attr_id: str) -> AttributeDef:
        return self._defs[attr_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._defs)

    def __len__(self) -> int:
        return len(self._defs)

    def __repr__(self) -> str:
        return f"AttributeDefs({list(self._defs)!r})"

    def to_document(self) -> list[dict[str, Any]]:
        """Serialize to a list of rules-data documents."""
        return [definition.to_document() for definition in self._defs.values()]

    # Must stay last in the class body: it shadows the builtin list there
    def list(self) -> "list[AttributeDef]":
        """Return the definitions in order."""
        return list(self._defs.values())


def _extract_rows(data: Any, source: str) -> list[Any]:
    """Find the definition list in any of the supported document shapes."""
    if isinstance(data, list):
        return data

    if not isinstance(data, dict):
        raise AttributeValidationError(f"Unrecognized attribute data in {source}")

    if "rows" in data:
        doc_type = data.get("type", ATTRIBUTE_SETTINGS_TYPE)
        if doc_type != ATTRIBUTE_SETTINGS_TYPE:
            raise AttributeValidationError(
                f"Unexpected document type '{doc_type}' in {source}"
            )
        version = data.get("version", CURRENT_DATA_VERSION)
        if not isinstance(version, int) or version > CURRENT_DATA_VERSION:
            raise AttributeValidationError(
                f"Unsupported data version {version!r} in {source}"
            )
        rows = data["rows"]
    elif "attribute_settings" in data:
        rows = data["attribute_settings"]
    elif "attributes" in data:
        rows = data["attributes"]
    else:
        raise AttributeValidationError(f"Missing attribute list in {source}")

    if not isinstance(rows, list):
        raise AttributeValidationError(f"Attribute list must be a list in {source}")
    return rows


def parse_attribute_defs(data: Any, source: str = "<data>") -> AttributeDefs:
    """
    Build a definition set from a parsed rules document.

    Accepts a bare list of definitions, the older ``{"attributes": [...]}``
    shape, and the ``{"type": "attribute_settings", "rows": [...]}`` shape.

    Args:
        data: The parsed document
        source: Where the data came from (for error messages)

    Returns:
        The validated definition set

    Raises:
        AttributeValidationError: If the document or a definition is invalid
        DuplicateAttributeError: If two definitions share an ID
    """
    rows = _extract_rows(data, source)

    definitions: list[AttributeDef] = []
    for index, row in enumerate(rows, start=1):
        if not isinstance(row, dict):
            raise AttributeValidationError(f"Attribute #{index} in {source} must be a mapping")
        if "id" not in row:
            raise AttributeValidationError(
                f"Attribute #{index} in {source} missing required field: id"
            )
        try:
            definitions.append(AttributeDef.model_validate(row))
        except ValidationError as e:
            raise AttributeValidationError(
                f"Failed to create attribute '{row.get('id')}' from {source}: {e}"
            ) from e

    return AttributeDefs.build(definitions)


def load_attribute_defs(file_path: Path) -> AttributeDefs:
    """
    Load a definition set from a JSON or YAML rules file.

    Args:
        file_path: Path to a .json, .yaml or .yml file

    Returns:
        The validated definition set

    Raises:
        RulesLoadError: If the file cannot be read or parsed
        AttributeValidationError: If the definitions are invalid
    """
    file_path = Path(file_path)
    try:
        with open(file_path, encoding="utf-8") as f:
            if file_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise RulesLoadError(f"File not found: {file_path}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RulesLoadError(f"Parsing error in {file_path}: {e}") from e
    except OSError as e:
        raise RulesLoadError(f"Error loading {file_path}: {e}") from e

    if data is None:
        raise RulesLoadError(f"Empty rules file: {file_path}")

    defs = parse_attribute_defs(data, str(file_path))
    logger.info("attribute_defs_loaded", path=str(file_path), count=len(defs))
    return defs


def save_attribute_defs(defs: AttributeDefs, file_path: Path) -> None:
    """
    Write a definition set to a rules file.

    JSON is written for a .json suffix, YAML otherwise. Parent directories are
    created as needed.
    """
    file_path = Path(file_path)
    document = {
        "type": ATTRIBUTE_SETTINGS_TYPE,
        "version": CURRENT_DATA_VERSION,
        "rows": defs.to_document(),
    }
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        if file_path.suffix.lower() == ".json":
            json.dump(document, f, indent=2)
            f.write("\n")
        else:
            yaml.safe_dump(document, f, sort_keys=False, allow_unicode=True)
    logger.info("attribute_defs_saved", path=str(file_path), count=len(defs))


@lru_cache
def factory_attribute_defs() -> AttributeDefs:
    """Get the packaged standard GURPS attribute definitions."""
    text = resources.files("gurpscalc.data").joinpath(FACTORY_RESOURCE).read_text(encoding="utf-8")
    return parse_attribute_defs(yaml.safe_load(text), FACTORY_RESOURCE)
