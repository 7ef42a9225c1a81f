"""The controller that turns IPAM requests into address allocations."""

from __future__ import annotations

import dataclasses
import logging
import queue
import threading
from typing import Protocol

from ipamctl.ipamspec import IPAMRequest, IPAMResponse, Operation

log = logging.getLogger(__name__)

_SHUTDOWN = object()


class Manager(Protocol):
    """An IP address manager backing the controller."""

    def get_ip_address(self, request: IPAMRequest) -> str:
        """Return the address already held for the request, or an empty string."""

    def allocate_next_ip_address(self, request: IPAMRequest) -> str:
        """Allocate a new address for the request, or return an empty string."""

    def release_ip_address(self, request: IPAMRequest) -> None:
        """Give the request's address back to the pool."""


class Orchestrator(Protocol):
    """The source of requests and the consumer of responses."""

    def setup_communication_channels(self, requests: queue.Queue, responses: queue.Queue) -> None:
        """Receive the queues used to exchange requests and responses."""

    def start(self, stop_event: threading.Event) -> None:
        """Begin producing requests until the event is set."""

    def stop(self) -> None:
        """Stop producing requests."""


class Controller:
    """Serves IPAM requests from an orchestrator using an address manager."""

    def __init__(
        self,
        orchestrator: Orchestrator,
        manager: Manager,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.manager = manager
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.requests: queue.Queue = queue.Queue()
        self.responses: queue.Queue = queue.Queue()
        self._worker: threading.Thread | None = None

    def handle(self, request: IPAMRequest) -> IPAMResponse | None:
        """Serve one request; return the response, or None when there is none to send."""
        if request.operation == Operation.CREATE:
            ip_addr = self.manager.get_ip_address(request)
            if ip_addr:
                return IPAMResponse(request=request, ip_addr=ip_addr, status=True)
            ip_addr = self.manager.allocate_next_ip_address(request)
            if ip_addr:
                log.debug("[CORE] Allocated IP: %s for Request: %s", ip_addr, request)
                return IPAMResponse(request=request, ip_addr=ip_addr, status=True)
            return None
        if request.operation == Operation.DELETE:
            ip_addr = self.manager.get_ip_address(request)
            if ip_addr:
                request = dataclasses.replace(request, ip_addr=ip_addr)
                self.manager.release_ip_address(request)
            return IPAMResponse(request=request, ip_addr="", status=True)
        return None

    def _run(self) -> None:
        while True:
            request = self.requests.get()
            if request is _SHUTDOWN:
                return
            try:
                response = self.handle(request)
            except Exception:
                log.exception("[CORE] Failed to process request: %s", request)
                continue
            if response is not None:
                self.responses.put(response)

    def start(self) -> None:
        """Connect the orchestrator, start it, and begin serving requests."""
        self.orchestrator.setup_communication_channels(self.requests, self.responses)
        log.info("[CORE] Controller started")
        self.orchestrator.start(self.stop_event)
        self._worker = threading.Thread(target=self._run, name="ipam-controller", daemon=True)
        self._worker.start()

    def stop(self) -> None:
        """Stop the orchestrator and the request worker."""
        self.orchestrator.stop()
        if self._worker is not None and self._worker.is_alive():
            self.requests.put(_SHUTDOWN)
            self._worker.join()
        self._worker = None