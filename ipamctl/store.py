"""An in-memory store of IPAM resources with watch notifications."""

from __future__ import annotations

import json
import threading
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ipamctl.resources import IPAM, IPAMList, GroupResource, resource

_IPAMS = resource("ipams")


class StoreError(Exception):
    """Raised when the store cannot carry out an operation."""


class NotFoundError(StoreError):
    """Raised when no IPAM of the given namespace and name exists."""

    def __init__(self, group_resource: GroupResource, name: str) -> None:
        self.group_resource = group_resource
        self.name = name
        super().__init__(f'{group_resource.resource}.{group_resource.group} "{name}" not found')


class AlreadyExistsError(StoreError):
    """Raised when creating an IPAM whose name is taken."""

    def __init__(self, group_resource: GroupResource, name: str) -> None:
        self.group_resource = group_resource
        self.name = name
        super().__init__(
            f'{group_resource.resource}.{group_resource.group} "{name}" already exists'
        )


class ConflictError(StoreError):
    """Raised when an update carries a stale resource version."""

    def __init__(self, group_resource: GroupResource, name: str) -> None:
        self.group_resource = group_resource
        self.name = name
        super().__init__(
            f"Operation cannot be fulfilled on {group_resource.resource}.{group_resource.group}"
            f' "{name}": the object has been modified; please apply your changes to the'
            " latest version and try again"
        )


class EventType(str, Enum):
    """The kind of change a watch event reports."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class WatchEvent:
    """A change to one stored IPAM."""

    type: EventType
    object: IPAM


Listener = Callable[[WatchEvent], None]


def _matches(ipam: IPAM, labels: Mapping[str, str] | None) -> bool:
    if not labels:
        return True
    own = ipam.metadata.labels
    return all(own.get(key) == value for key, value in labels.items())


def _merge_patch(target: Any, patch: Any) -> Any:
    if not isinstance(patch, dict):
        return patch
    result = dict(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = _merge_patch(result.get(key), value)
    return result


class IPAMStore:
    """Holds IPAM resources by namespace and name, with optimistic concurrency."""

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], IPAM] = {}
        self._revision = 0
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    def _next_version(self) -> str:
        self._revision += 1
        return str(self._revision)

    def _notify(self, event_type: EventType, ipam: IPAM) -> None:
        for listener in list(self._listeners):
            listener(WatchEvent(type=event_type, object=ipam.copy()))

    def _stored(self, namespace: str, name: str) -> IPAM:
        try:
            return self._objects[(namespace, name)]
        except KeyError:
            raise NotFoundError(_IPAMS, name) from None

    def _check_version(self, given: IPAM, stored: IPAM) -> None:
        version = given.metadata.resource_version
        if version and version != stored.metadata.resource_version:
            raise ConflictError(_IPAMS, stored.metadata.name)

    def create(self, ipam: IPAM) -> IPAM:
        """Store a new IPAM and return the stored copy."""
        name = ipam.metadata.name
        if not name:
            raise StoreError("name is required")
        with self._lock:
            key = (ipam.metadata.namespace, name)
            if key in self._objects:
                raise AlreadyExistsError(_IPAMS, name)
            stored = ipam.copy()
            stored.metadata.uid = str(uuid.uuid4())
            stored.metadata.resource_version = self._next_version()
            self._objects[key] = stored
            self._notify(EventType.ADDED, stored)
            return stored.copy()

    def get(self, namespace: str, name: str) -> IPAM:
        """Return a copy of the IPAM stored under the namespace and name."""
        with self._lock:
            return self._stored(namespace, name).copy()

    def list(self, namespace: str = "", labels: Mapping[str, str] | None = None) -> IPAMList:
        """List IPAMs in a namespace, or in all of them when it is empty."""
        with self._lock:
            items = [
                ipam.copy()
                for (ns, _), ipam in sorted(self._objects.items())
                if (not namespace or ns == namespace) and _matches(ipam, labels)
            ]
            return IPAMList(items=items, resource_version=str(self._revision))

    def update(self, ipam: IPAM) -> IPAM:
        """Replace an IPAM's metadata and spec; its status is kept."""
        with self._lock:
            stored = self._stored(ipam.metadata.namespace, ipam.metadata.name)
            self._check_version(ipam, stored)
            updated = ipam.copy()
            updated.status = stored.status
            updated.metadata.uid = stored.metadata.uid
            updated.metadata.resource_version = self._next_version()
            self._objects[(updated.metadata.namespace, updated.metadata.name)] = updated
            self._notify(EventType.MODIFIED, updated)
            return updated.copy()

    def update_status(self, ipam: IPAM) -> IPAM:
        """Replace an IPAM's status; everything else is kept."""
        with self._lock:
            stored = self._stored(ipam.metadata.namespace, ipam.metadata.name)
            self._check_version(ipam, stored)
            updated = stored.copy()
            updated.status = ipam.copy().status
            updated.metadata.resource_version = self._next_version()
            self._objects[(updated.metadata.namespace, updated.metadata.name)] = updated
            self._notify(EventType.MODIFIED, updated)
            return updated.copy()

    def patch(self, namespace: str, name: str, data: Mapping[str, Any] | str | bytes) -> IPAM:
        """Apply a JSON merge patch to an IPAM and return the result."""
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        if not isinstance(data, Mapping):
            raise StoreError("patch must be a JSON object")
        with self._lock:
            stored = self._stored(namespace, name)
            merged = IPAM.from_dict(_merge_patch(stored.to_dict(), dict(data)))
            merged.metadata.name = name
            merged.metadata.namespace = namespace
            merged.metadata.uid = stored.metadata.uid
            merged.metadata.resource_version = self._next_version()
            self._objects[(namespace, name)] = merged
            self._notify(EventType.MODIFIED, merged)
            return merged.copy()

    def delete(self, namespace: str, name: str) -> None:
        """Remove an IPAM."""
        with self._lock:
            stored = self._stored(namespace, name)
            del self._objects[(namespace, name)]
            self._notify(EventType.DELETED, stored)

    def delete_collection(
        self, namespace: str = "", labels: Mapping[str, str] | None = None
    ) -> int:
        """Remove every IPAM matching the namespace and labels; return how many."""
        with self._lock:
            doomed = [
                key
                for key, ipam in sorted(self._objects.items())
                if (not namespace or key[0] == namespace) and _matches(ipam, labels)
            ]
            for key in doomed:
                self._notify(EventType.DELETED, self._objects.pop(key))
            return len(doomed)

    def subscribe(self, listener: Listener) -> IPAMList:
        """Send future changes to the listener; return the objects stored now."""
        with self._lock:
            self._listeners.append(listener)
            return self.list()

    def unsubscribe(self, listener: Listener) -> None:
        """Stop sending changes to the listener."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)


class IPAMLister:
    """Read-only access to the IPAMs held by a store."""

    def __init__(self, store: IPAMStore) -> None:
        self.store = store

    def list(self, labels: Mapping[str, str] | None = None) -> list[IPAM]:
        """List IPAMs of every namespace that carry the given labels."""
        return self.store.list("", labels).items

    def get(self, namespace: str, name: str) -> IPAM:
        """Return the IPAM of the namespace and name."""
        return self.store.get(namespace, name)