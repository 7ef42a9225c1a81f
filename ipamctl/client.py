"""A client for IPAM resources with per-namespace informers."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable

from ipamctl.informers import EventHandlers, IPAMInformer
from ipamctl.resources import IPAM
from ipamctl.store import IPAMStore, StoreError

log = logging.getLogger(__name__)

MAX_RETRIES = 10
_STALE_VERSION = "please apply your changes to the latest version"


class InformerError(Exception):
    """Raised when an informer cannot be added for a namespace."""


class IPAMClient:
    """Reads and writes IPAM resources and watches them by namespace."""

    def __init__(
        self,
        store: IPAMStore | None = None,
        namespaces: Iterable[str] = (),
        event_handlers: EventHandlers | None = None,
    ) -> None:
        self.store = store if store is not None else IPAMStore()
        self.namespaces = list(dict.fromkeys(namespaces))
        self.informers: dict[str, IPAMInformer] = {}
        try:
            for namespace in self.namespaces:
                self.add_namespaced_informer(namespace, event_handlers)
        except InformerError as err:
            log.error("Failed to Setup Informers %s", err)
        log.debug("Created New IPAM Client")

    def create(self, ipam: IPAM) -> IPAM:
        """Store a new IPAM."""
        return self.store.create(ipam)

    def _write_with_retry(
        self, ipam: IPAM, write: Callable[[IPAM], IPAM], field: str, what: str
    ) -> IPAM:
        namespace = ipam.metadata.namespace
        name = ipam.metadata.name
        wanted = getattr(ipam, field)
        for attempt in range(MAX_RETRIES):
            try:
                return write(ipam)
            except StoreError as err:
                if _STALE_VERSION not in str(err) or attempt == MAX_RETRIES - 1:
                    raise
            try:
                fresh = self.get(namespace, name)
            except StoreError as err:
                log.error(
                    "Unable to find IPAM: %s/%s to %s. Error: %s", namespace, name, what, err
                )
                raise
            ipam = dataclasses.replace(fresh, **{field: wanted})
        raise StoreError(f"unable to {what} IPAM {namespace}/{name}")

    def update(self, ipam: IPAM) -> IPAM:
        """Update an IPAM's spec, retrying on stale versions."""
        return self._write_with_retry(ipam, self.store.update, "spec", "update")

    def update_status(self, ipam: IPAM) -> IPAM:
        """Update an IPAM's status, retrying on stale versions."""
        return self._write_with_retry(ipam, self.store.update_status, "status", "update status")

    def patch(self, ipam: IPAM) -> IPAM:
        """Merge the IPAM's spec into the stored object."""
        return self.store.patch(
            ipam.metadata.namespace, ipam.metadata.name, {"spec": ipam.spec.to_dict()}
        )

    def delete(self, namespace: str, name: str) -> None:
        """Remove an IPAM."""
        self.store.delete(namespace, name)

    def get(self, namespace: str, name: str) -> IPAM:
        """Return the IPAM of the namespace and name."""
        return self.store.get(namespace, name)

    def list(self, namespace: str = "") -> list[IPAM]:
        """List the IPAMs of a namespace, or of all when it is empty."""
        return self.store.list(namespace).items

    def start(self) -> None:
        """Start every informer."""
        for informer in self.informers.values():
            informer.start()

    def stop(self) -> None:
        """Stop every informer."""
        for informer in self.informers.values():
            informer.stop()

    def watching_all_namespaces(self) -> bool:
        """Tell whether a single informer watches every namespace."""
        return bool(self.informers) and "" in self.informers

    def add_namespaced_informer(
        self, namespace: str, event_handlers: EventHandlers | None = None
    ) -> None:
        """Add an informer for a namespace; the empty namespace means all."""
        if self.watching_all_namespaces():
            raise InformerError("Cannot add additional namespaces when already watching all.")
        if self.informers and namespace == "":
            raise InformerError(
                "Cannot watch all namespaces when already watching specific ones."
            )
        if namespace in self.informers:
            return
        log.debug("[ipam] Creating Informers for Namespace %s", namespace)
        self.informers[namespace] = IPAMInformer(self.store, namespace, event_handlers)

    def get_namespaced_informer(self, namespace: str) -> IPAMInformer | None:
        """Return the informer that covers a namespace, or None."""
        if self.watching_all_namespaces():
            namespace = ""
        return self.informers.get(namespace)