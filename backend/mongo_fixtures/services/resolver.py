"""Fixture resolution: turn inline data, files or directories into a FixtureSet.

A FixtureSet maps collection names to ordered document lists:

    {"archer": [{"name": "Sterling"}, {"name": "Lana"}]}

Collection values may also be mappings, in which case the keys only name
documents for the fixture author and the values become the documents:

    {"archer": {"sterling": {"name": "Sterling"}, "lana": {"name": "Lana"}}}
"""

import importlib.util
import logging
import os
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any

from bson import json_util

from mongo_fixtures.exceptions import (
    InvalidFixtureShapeError,
    ResourceNotFoundError,
    UnsupportedFixtureInputError,
)

logger = logging.getLogger(__name__)

Document = dict[str, Any]
FixtureSet = dict[str, list[Document]]

# Attribute a Python fixture module may define to export its data explicitly
MODULE_EXPORT_NAME = "fixtures"

SUPPORTED_SUFFIXES = (".json", ".py")


class FixtureInputKind(str, Enum):
    """The three shapes of fixture input, decided once in classify()."""

    INLINE_MAPPING = "inline_mapping"
    FILE_PATH = "file_path"
    DIRECTORY_PATH = "directory_path"


@dataclass(frozen=True)
class FixtureInput:
    """Classified fixture input.

    Args:
        kind: Which shape the input has.
        value: The mapping for INLINE_MAPPING, an absolute Path otherwise.
    """

    kind: FixtureInputKind
    value: Mapping[str, Any] | Path


def classify(value: Any, base_dir: Path | None = None) -> FixtureInput:
    """
    Decide what kind of fixture input `value` is.

    Args:
        value: A mapping of collection name to documents, or a path
            (str or os.PathLike) to a fixture file or directory.
        base_dir: Directory that relative paths are resolved against.
            Defaults to the current working directory.

    Returns:
        FixtureInput with an absolute path for path inputs.

    Raises:
        UnsupportedFixtureInputError: If `value` is not a mapping or path.
        ResourceNotFoundError: If the path does not exist.
    """
    if isinstance(value, Mapping):
        return FixtureInput(FixtureInputKind.INLINE_MAPPING, value)

    if not isinstance(value, (str, os.PathLike)):
        raise UnsupportedFixtureInputError(
            "Fixtures must be a mapping or a path to a file or directory, "
            f"not {type(value).__name__}"
        )

    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path

    try:
        is_dir = path.is_dir()
        exists = is_dir or path.exists()
    except OSError as e:
        raise ResourceNotFoundError(f"Cannot access fixture path {path}: {e}") from e

    if not exists:
        raise ResourceNotFoundError(f"Fixture path not found: {path}")

    kind = FixtureInputKind.DIRECTORY_PATH if is_dir else FixtureInputKind.FILE_PATH
    return FixtureInput(kind, path)


# =============================================================================
# Normalization
# =============================================================================


def normalize_batch(collection: str, value: Any) -> list[Document]:
    """
    Normalize one collection's fixture value into a document list.

    Sequences keep their order. Mappings contribute their values in
    iteration order and their keys are discarded.
    """
    if isinstance(value, Mapping):
        items = list(value.values())
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        items = list(value)
    else:
        raise InvalidFixtureShapeError(
            f"Collection '{collection}' must be a list or mapping of documents, "
            f"not {type(value).__name__}"
        )

    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise InvalidFixtureShapeError(
                f"Document {index} in collection '{collection}' must be a mapping, "
                f"not {type(item).__name__}"
            )

    return [dict(item) for item in items]


def normalize_fixture_set(data: Any, source: str = "inline fixtures") -> FixtureSet:
    """Normalize a top-level fixture mapping into a FixtureSet."""
    if not isinstance(data, Mapping):
        raise InvalidFixtureShapeError(
            f"{source} must export a mapping of collection name to documents, "
            f"not {type(data).__name__}"
        )

    fixture_set: FixtureSet = {}
    for collection, value in data.items():
        if not isinstance(collection, str) or not collection:
            raise InvalidFixtureShapeError(
                f"{source}: collection names must be non-empty strings, got {collection!r}"
            )
        fixture_set[collection] = normalize_batch(collection, value)
    return fixture_set


def merge_fixture_sets(fixture_sets: list[FixtureSet]) -> FixtureSet:
    """Concatenate document lists per collection, in the order given."""
    merged: FixtureSet = {}
    for fixture_set in fixture_sets:
        for collection, documents in fixture_set.items():
            merged.setdefault(collection, []).extend(documents)
    return merged


# =============================================================================
# File loading
# =============================================================================


def _load_json(path: Path) -> Any:
    """Parse a JSON file, decoding MongoDB Extended JSON ($oid, $date, ...)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ResourceNotFoundError(f"Cannot read fixture file {path}: {e}") from e
    try:
        return json_util.loads(text)
    except ValueError as e:
        raise InvalidFixtureShapeError(f"Invalid JSON in {path}: {e}") from e


def _import_module(path: Path) -> ModuleType:
    """Import a Python file as a standalone module outside sys.modules."""
    module_name = f"_mongo_fixtures_{path.stem}_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise UnsupportedFixtureInputError(f"Cannot import fixture module {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except OSError as e:
        raise ResourceNotFoundError(f"Cannot read fixture module {path}: {e}") from e
    except Exception as e:
        raise InvalidFixtureShapeError(f"Cannot load fixture module {path}: {e}") from e
    return module


def _module_exports(module: ModuleType) -> Any:
    """
    Collect fixture data exported by a Python module.

    A module-level `fixtures` attribute wins. Otherwise every public
    attribute (restricted to `__all__` when defined) holding a list, tuple
    or mapping is a collection.
    """
    if hasattr(module, MODULE_EXPORT_NAME):
        return getattr(module, MODULE_EXPORT_NAME)

    names = getattr(module, "__all__", None)
    if names is None:
        names = [name for name in vars(module) if not name.startswith("_")]

    return {
        name: getattr(module, name)
        for name in names
        if isinstance(getattr(module, name, None), (list, tuple, Mapping))
    }


def load_exports(path: Path) -> Any:
    """
    Load the raw data exported by a fixture file.

    Raises:
        UnsupportedFixtureInputError: If the file type is not supported.
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        return _load_json(path)
    if suffix == ".py":
        return _module_exports(_import_module(path))
    raise UnsupportedFixtureInputError(
        f"Unsupported fixture file type '{path.suffix}' for {path}; "
        f"expected one of {', '.join(SUPPORTED_SUFFIXES)}"
    )


def _directory_entries(directory: Path) -> list[Path]:
    """List loadable fixture files directly inside `directory`, sorted by name."""
    files: list[Path] = []
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.name.startswith((".", "__")) or entry.is_dir():
            continue
        if entry.suffix.lower() not in SUPPORTED_SUFFIXES:
            logger.warning(f"Skipping unsupported fixture file: {entry}")
            continue
        files.append(entry)
    return files


# =============================================================================
# Resolver
# =============================================================================


class FixtureResolver:
    """
    Resolves fixture input into a canonical FixtureSet.

    Relative paths are resolved against `base_dir`, which is fixed when the
    resolver is created. When omitted, the working directory at resolve
    time is used.
    """

    def __init__(self, base_dir: str | os.PathLike | None = None):
        self.base_dir = Path(base_dir).expanduser() if base_dir is not None else None

    def resolve(self, value: Any) -> FixtureSet:
        """
        Resolve fixture input.

        Args:
            value: Inline mapping, or path to a fixture file or directory.

        Returns:
            Mapping of collection name to a list of documents.

        Raises:
            UnsupportedFixtureInputError: Unusable input type or file type.
            ResourceNotFoundError: Path does not exist.
            InvalidFixtureShapeError: Data is not collection -> documents.
        """
        fixture_input = classify(value, self.base_dir)

        if fixture_input.kind is FixtureInputKind.INLINE_MAPPING:
            return normalize_fixture_set(fixture_input.value)
        if fixture_input.kind is FixtureInputKind.FILE_PATH:
            return self.resolve_file(fixture_input.value)
        return self.resolve_directory(fixture_input.value)

    def resolve_file(self, path: Path) -> FixtureSet:
        """Load and normalize a single fixture file."""
        logger.debug(f"Resolving fixture file {path}")
        return normalize_fixture_set(load_exports(path), source=str(path))

    def resolve_directory(self, directory: Path) -> FixtureSet:
        """Load every fixture file in `directory` (non-recursive) and merge them."""
        files = _directory_entries(directory)
        logger.debug(f"Resolving {len(files)} fixture files in {directory}")
        return merge_fixture_sets([self.resolve_file(path) for path in files])
