"""Informers that mirror a namespace of the IPAM store and report changes."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ipamctl.resources import IPAM
from ipamctl.store import EventType, IPAMStore, WatchEvent

log = logging.getLogger(__name__)

_SHUTDOWN = object()


@dataclass
class EventHandlers:
    """Callbacks run when an IPAM is added, updated or deleted."""

    add_func: Callable[[IPAM], None] | None = None
    update_func: Callable[[IPAM, IPAM], None] | None = None
    delete_func: Callable[[IPAM], None] | None = None


class IPAMInformer:
    """Watches the IPAMs of one namespace, or of all when it is empty."""

    def __init__(
        self,
        store: IPAMStore,
        namespace: str = "",
        handlers: EventHandlers | None = None,
    ) -> None:
        self.store = store
        self.namespace = namespace
        self.handlers = handlers if handlers is not None else EventHandlers()
        self._cache: dict[tuple[str, str], IPAM] = {}
        self._events: queue.Queue = queue.Queue()
        self._synced = threading.Event()
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()

    def _wanted(self, ipam: IPAM) -> bool:
        return not self.namespace or ipam.metadata.namespace == self.namespace

    def _enqueue(self, event: WatchEvent) -> None:
        if self._wanted(event.object):
            self._events.put(event)

    def _call(self, handler: Callable[..., None] | None, *objects: IPAM) -> None:
        if handler is None:
            return
        try:
            handler(*objects)
        except Exception:
            log.exception("[ipam] Event handler failed")

    def _added(self, ipam: IPAM) -> None:
        key = (ipam.metadata.namespace, ipam.metadata.name)
        old = self._cache.get(key)
        self._cache[key] = ipam
        if old is None:
            self._call(self.handlers.add_func, ipam)
        else:
            self._call(self.handlers.update_func, old, ipam)

    def _deleted(self, ipam: IPAM) -> None:
        self._cache.pop((ipam.metadata.namespace, ipam.metadata.name), None)
        self._call(self.handlers.delete_func, ipam)

    def _dispatch(self, event: WatchEvent) -> None:
        if event.type is EventType.DELETED:
            self._deleted(event.object)
        else:
            self._added(event.object)

    def _run(self, initial: Iterable[IPAM], events: queue.Queue) -> None:
        self._cache.clear()
        for ipam in initial:
            if self._wanted(ipam):
                self._added(ipam)
        self._synced.set()
        while True:
            event = events.get()
            if event is _SHUTDOWN:
                return
            self._dispatch(event)

    def start(self) -> None:
        """Begin watching and wait until the existing objects are delivered."""
        with self._lock:
            if self._worker is not None:
                return
            log.info("Starting IPAMClient Informer")
            self._events = queue.Queue()
            self._synced.clear()
            initial = self.store.subscribe(self._enqueue)
            self._worker = threading.Thread(
                target=self._run,
                args=(initial.items, self._events),
                name=f"ipam-informer-{self.namespace or 'all'}",
                daemon=True,
            )
            self._worker.start()
        self._synced.wait()

    def stop(self) -> None:
        """Stop watching; no handler runs after this returns."""
        with self._lock:
            worker = self._worker
            if worker is None:
                return
            self.store.unsubscribe(self._enqueue)
            self._events.put(_SHUTDOWN)
            if worker is not threading.current_thread():
                worker.join()
            self._worker = None

    def has_synced(self) -> bool:
        """Tell whether the objects present at start have been delivered."""
        return self._synced.is_set()