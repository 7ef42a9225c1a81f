"""The IPAM custom resource and its JSON form."""

from __future__ import annotations

import copy as _copy
from dataclasses import dataclass, field
from typing import Any

GROUP = "fic.f5.com"
VERSION = "v1"
API_VERSION = f"{GROUP}/{VERSION}"
KIND = "IPAM"
LIST_KIND = "IPAMList"
KNOWN_KINDS = (KIND, LIST_KIND, "Status")


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop empty values, as JSON ``omitempty`` does."""
    return {key: value for key, value in data.items() if value}


@dataclass(frozen=True)
class GroupResource:
    """A resource name qualified by its API group."""

    group: str
    resource: str


def resource(name: str) -> GroupResource:
    """Qualify an unqualified resource name with the IPAM API group."""
    return GroupResource(group=GROUP, resource=name)


@dataclass
class ObjectMeta:
    """Identifying metadata of a stored object."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    resource_version: str = ""
    uid: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "namespace": self.namespace,
                "labels": dict(self.labels),
                "annotations": dict(self.annotations),
                "resourceVersion": self.resource_version,
                "uid": self.uid,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ObjectMeta:
        data = data or {}
        return cls(
            name=data.get("name") or "",
            namespace=data.get("namespace") or "",
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
            resource_version=data.get("resourceVersion") or "",
            uid=data.get("uid") or "",
        )


@dataclass
class HostSpec:
    """A host for which an address is wanted."""

    host: str = ""
    key: str = ""
    ipam_label: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact({"host": self.host, "key": self.key, "ipamLabel": self.ipam_label})

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> HostSpec:
        data = data or {}
        return cls(
            host=data.get("host") or "",
            key=data.get("key") or "",
            ipam_label=data.get("ipamLabel") or "",
        )


@dataclass
class IPSpec:
    """An address handed out for a host or key."""

    ip: str = ""
    host: str = ""
    key: str = ""
    ipam_label: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"ip": self.ip, "host": self.host, "key": self.key, "ipamLabel": self.ipam_label}
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IPSpec:
        data = data or {}
        return cls(
            ip=data.get("ip") or "",
            host=data.get("host") or "",
            key=data.get("key") or "",
            ipam_label=data.get("ipamLabel") or "",
        )


@dataclass
class IPAMSpec:
    """The wanted state: the hosts that need addresses."""

    host_specs: list[HostSpec] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _compact({"hostSpecs": [spec.to_dict() for spec in self.host_specs]})

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IPAMSpec:
        data = data or {}
        return cls(host_specs=[HostSpec.from_dict(item) for item in data.get("hostSpecs") or []])


@dataclass
class IPAMStatus:
    """The observed state: the addresses handed out."""

    ip_status: list[IPSpec] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _compact({"IPStatus": [spec.to_dict() for spec in self.ip_status]})

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IPAMStatus:
        data = data or {}
        return cls(ip_status=[IPSpec.from_dict(item) for item in data.get("IPStatus") or []])


@dataclass
class IPAM:
    """The IPAM custom resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: IPAMSpec = field(default_factory=IPAMSpec)
    status: IPAMStatus = field(default_factory=IPAMStatus)
    api_version: str = API_VERSION
    kind: str = KIND

    def to_dict(self) -> dict[str, Any]:
        result = _compact({"apiVersion": self.api_version, "kind": self.kind})
        result["metadata"] = self.metadata.to_dict()
        result["spec"] = self.spec.to_dict()
        result["status"] = self.status.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IPAM:
        data = data or {}
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=IPAMSpec.from_dict(data.get("spec")),
            status=IPAMStatus.from_dict(data.get("status")),
            api_version=data.get("apiVersion") or "",
            kind=data.get("kind") or "",
        )

    def copy(self) -> IPAM:
        """Return a deep copy that shares no state with this object."""
        return _copy.deepcopy(self)


@dataclass
class IPAMList:
    """A list of IPAM resources."""

    items: list[IPAM] = field(default_factory=list)
    resource_version: str = ""
    api_version: str = API_VERSION
    kind: str = LIST_KIND

    def to_dict(self) -> dict[str, Any]:
        result = _compact({"apiVersion": self.api_version, "kind": self.kind})
        result["metadata"] = _compact({"resourceVersion": self.resource_version})
        result["items"] = [item.to_dict() for item in self.items]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> IPAMList:
        data = data or {}
        metadata = data.get("metadata") or {}
        return cls(
            items=[IPAM.from_dict(item) for item in data.get("items") or []],
            resource_version=metadata.get("resourceVersion") or "",
            api_version=data.get("apiVersion") or "",
            kind=data.get("kind") or "",
        )