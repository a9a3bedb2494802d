"""Persistence of active filter sets in key-value blob stores.

The store is an external collaborator with two calls, ``load`` and ``save``.
The composition controller reads it once at startup (hydration) and writes it
when the user applies the current filters.
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .config.configuration import config
from .errors import MalformedPersistedState, UnresolvableFilterReference
from .filters.active import ActiveFilter
from .filters.active_set import ActiveFilterSet
from .filters.registry import FilterRegistry
from .filters.values import default_value, normalize_value, validate_value

logger = logging.getLogger(__name__)


class FilterStore(Protocol):
    """Blob store holding one serialized active filter set."""

    def load(self) -> bytes | None:
        """Return the stored blob, or None when nothing was saved yet."""
        ...

    def save(self, data: bytes) -> None:
        ...


class InMemoryFilterStore:
    def __init__(self, data: bytes | None = None) -> None:
        self.data = data

    def load(self) -> bytes | None:
        return self.data

    def save(self, data: bytes) -> None:
        self.data = data


class FileFilterStore:
    """Store backed by a single JSON file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or config.filter_store_path)

    def load(self) -> bytes | None:
        if not self.path.exists():
            return None
        return self.path.read_bytes()

    def save(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, self.path)


class MongoFilterStore:
    """Store keeping each filter set as one document in a MongoDB collection."""

    def __init__(self, db: Database, key: str | None = None, collection_name: str | None = None):
        self.collection: Collection = db[collection_name or config.mongo_filter_collection]
        self.key = key or config.filter_store_key
        # Skip index creation during testing (MongoDB not available yet)
        if not os.environ.get("TESTING"):
            self.collection.create_index("key", unique=True)

    def load(self) -> bytes | None:
        try:
            doc = self.collection.find_one({"key": self.key}, {"filters": 1, "_id": 0})
        except PyMongoError as e:
            raise PyMongoError(f"Failed to load active filters under key {self.key}") from e
        if doc is None or "filters" not in doc:
            return None
        if not isinstance(doc["filters"], str):
            raise MalformedPersistedState(f"Stored filters under key {self.key} are not a JSON string")
        return doc["filters"].encode("utf-8")

    def save(self, data: bytes) -> None:
        try:
            self.collection.update_one(
                {"key": self.key},
                {"$set": {"filters": data.decode("utf-8")}},
                upsert=True,
            )
        except PyMongoError as e:
            raise PyMongoError(f"Failed to save active filters under key {self.key}") from e


def serialize_filters(filter_set: ActiveFilterSet) -> bytes:
    """Encode ``filter_set`` as a JSON list of persisted active filters."""
    return json.dumps(filter_set.to_list()).encode("utf-8")


def _resolve_entry(entry: dict, registry: type[FilterRegistry]) -> ActiveFilter:
    active_filter = ActiveFilter.from_dict(entry)
    definition = registry.lookup(active_filter.definition_id)
    if definition is None:
        raise UnresolvableFilterReference(active_filter.definition_id)

    if not definition.allows(active_filter.operator):
        logger.warning(
            f"Filter {active_filter.id} has operator {active_filter.operator!r} not allowed for "
            f"{definition.id}, using {definition.default_operator.value}"
        )
        active_filter.operator = definition.default_operator

    if not validate_value(definition, active_filter.value):
        logger.warning(f"Filter {active_filter.id} has a value of the wrong shape, using the default")
        active_filter.value = default_value(definition.kind)
    else:
        active_filter.value = normalize_value(active_filter.value)
    return active_filter


def deserialize_filters(data: bytes | str, registry: type[FilterRegistry]) -> ActiveFilterSet:
    """Decode a persisted active filter set.

    Entries whose definition no longer resolves, or that lack an id, are
    dropped one by one; the rest of the set survives.

    :raises MalformedPersistedState: If the blob is not a JSON list
    """
    try:
        state = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise MalformedPersistedState(f"Persisted filters are not valid JSON: {e}") from e
    if not isinstance(state, list):
        raise MalformedPersistedState(f"Persisted filters must be a list, got {type(state).__name__}")

    filters: list[ActiveFilter] = []
    seen_ids: set[str] = set()
    for entry in state:
        if not isinstance(entry, dict):
            logger.warning(f"Dropping persisted filter that is not an object: {entry!r}")
            continue
        try:
            active_filter = _resolve_entry(entry, registry)
        except UnresolvableFilterReference as e:
            logger.warning(f"Dropping persisted filter: {e}")
            continue
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping malformed persisted filter {entry!r}: {e}")
            continue
        if active_filter.id in seen_ids:
            logger.warning(f"Dropping persisted filter with duplicate id {active_filter.id}")
            continue
        seen_ids.add(active_filter.id)
        filters.append(active_filter)

    return ActiveFilterSet(registry, filters)


def hydrate(store: FilterStore, registry: type[FilterRegistry]) -> ActiveFilterSet:
    """Best-effort read of the stored set.

    A store that cannot be read or holds malformed data yields an empty set.
    """
    try:
        data = store.load()
        if not data:
            return ActiveFilterSet(registry)
        return deserialize_filters(data, registry)
    except (MalformedPersistedState, PyMongoError, OSError) as e:
        logger.warning(f"Ignoring persisted filters: {e}")
        return ActiveFilterSet(registry)


def persist(store: FilterStore, filter_set: ActiveFilterSet) -> None:
    store.save(serialize_filters(filter_set))
