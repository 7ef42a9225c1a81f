# ipamctl

`ipamctl` is an IP address management controller. An orchestrator asks for an
address for a host name or key, the controller asks an IP manager to hand one
out (or return the one already held), and the answer goes back to the
orchestrator. A delete request releases the address.

Alongside the controller the package holds the `IPAM` resource model, with its
host specs in `spec` and the addresses handed out in `status`, and an
in-memory store, lister, informers and client to keep and watch those
resources.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `ipamctl.ipamspec`: `Operation` (`CREATE`, `DELETE`), `IPAMRequest` and `IPAMResponse`.
- `ipamctl.resources`: `IPAM`, `IPAMSpec`, `IPAMStatus`, `HostSpec`, `IPSpec`,
  `ObjectMeta` and `IPAMList`, each with `to_dict()` and `from_dict()`;
  `IPAM.copy()` for a deep copy; `GroupResource` and `resource(name)`, which
  qualifies a resource name with the `fic.f5.com` group.
- `ipamctl.controller`: the `Manager` and `Orchestrator` interfaces and the `Controller`.
- `ipamctl.store`: `IPAMStore`, an in-memory store of IPAM resources with
  watch events, the errors it raises (`StoreError`, `NotFoundError`,
  `AlreadyExistsError`, `ConflictError`), `EventType`, `WatchEvent` and
  `IPAMLister`.
- `ipamctl.informers`: `IPAMInformer` and `EventHandlers`, which deliver add,
  update and delete events for one namespace or for all of them.
- `ipamctl.client`: `IPAMClient`, which wraps a store with retry rules for
  updates and keeps one informer per watched namespace, and `InformerError`.

## The controller

```python
from ipamctl.controller import Controller
from ipamctl.ipamspec import IPAMRequest, Operation

controller = Controller(orchestrator, manager, stop_event)
controller.start()

response = controller.handle(
    IPAMRequest(operation=Operation.CREATE, host_name="foo.com", ipam_label="Dev")
)
print(response.ip_addr)
```

`orchestrator` and `manager` are your implementations of `Orchestrator` and
`Manager`. `start()` hands the orchestrator two queues through
`setup_communication_channels(requests, responses)`, calls its `start()` with
the stop event, and starts a worker thread that takes `IPAMRequest` objects
from the request queue and puts `IPAMResponse` objects on the response queue.
`stop()` stops the orchestrator and the worker. `handle()` serves a single
request directly.

A create request for a host or key that already holds an address gets that
address back, not a new one; if no address can be allocated, no response is
sent. A delete request releases any held address and always answers with an
empty address and a true status.

## Keeping IPAM resources

```python
from ipamctl.client import IPAMClient
from ipamctl.informers import EventHandlers
from ipamctl.resources import IPAM, IPAMSpec, HostSpec, ObjectMeta
from ipamctl.store import IPAMStore

store = IPAMStore()
handlers = EventHandlers(add_func=lambda ipam: print("added", ipam.metadata.name))
client = IPAMClient(store, ["default"], handlers)
client.start()

client.create(
    IPAM(
        metadata=ObjectMeta(name="ipam", namespace="default"),
        spec=IPAMSpec(host_specs=[HostSpec(host="foo.com", ipam_label="Dev")]),
    )
)
print(client.get("default", "ipam").spec.host_specs[0].host)
client.stop()
```

The store gives every object a uid and a resource version. An update carrying
a stale resource version raises `ConflictError`; `IPAMClient.update()` and
`update_status()` then fetch the latest version and try again, up to ten times,
keeping the spec (or status) that was asked for. `IPAMStore.patch()` applies a
JSON merge patch; `IPAMClient.patch()` merges the given object's spec.

An informer for the empty namespace watches every namespace. A client cannot
add namespace informers once it watches all of them, nor watch all once it
watches specific ones; either attempt raises `InformerError`.

## What the package does not do

Resources live only in memory in an `IPAMStore`; nothing is written to disk
and nothing talks to a cluster API server. There is no IP manager or
orchestrator implementation and no command-line program: you supply the
`Manager` and `Orchestrator` and run the `Controller` from your own code.