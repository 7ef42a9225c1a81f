"""Requests exchanged between an orchestrator and the IPAM controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operation(str, Enum):
    """What an IPAM request asks the controller to do."""

    CREATE = "Create"
    DELETE = "Delete"

    def __str__(self) -> str:
        return self.value


@dataclass
class IPAMRequest:
    """A request to allocate or release an IP address."""

    metadata: Any = None
    operation: Operation | str = ""
    host_name: str = ""
    ip_addr: str = ""
    key: str = ""
    ipam_label: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.operation, Operation):
            try:
                self.operation = Operation(self.operation)
            except ValueError:
                pass

    def __str__(self) -> str:
        return (
            f"\nHostname: {self.host_name}\tKey: {self.key}"
            f"\tIPAMLabel: {self.ipam_label}\tIPAddr: {self.ip_addr}"
            f"\tOperation: {self.operation}\n"
        )


@dataclass
class IPAMResponse:
    """The controller's answer to an :class:`IPAMRequest`."""

    request: IPAMRequest
    ip_addr: str = ""
    status: bool = False