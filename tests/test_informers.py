import queue

from ipamctl.informers import EventHandlers, IPAMInformer
from ipamctl.resources import IPAM, HostSpec, IPAMSpec, ObjectMeta
from ipamctl.store import IPAMStore


def make_ipam(name, namespace="default", host="foo.com"):
    return IPAM(
        metadata=ObjectMeta(name=name, namespace=namespace),
        spec=IPAMSpec(host_specs=[HostSpec(host=host, key="k", ipam_label="Dev")]),
    )


class Recorder:
    def __init__(self):
        self.events = queue.Queue()
        self.handlers = EventHandlers(
            add_func=lambda obj: self.events.put(("add", obj)),
            update_func=lambda old, new: self.events.put(("update", old, new)),
            delete_func=lambda obj: self.events.put(("delete", obj)),
        )

    def next(self):
        return self.events.get(timeout=5)


def test_not_synced_before_start():
    informer = IPAMInformer(IPAMStore(), "default", Recorder().handlers)
    assert informer.has_synced() is False


def test_start_delivers_existing_objects():
    store = IPAMStore()
    store.create(make_ipam("one"))
    store.create(make_ipam("two"))
    rec = Recorder()
    informer = IPAMInformer(store, "default", rec.handlers)
    informer.start()
    try:
        assert informer.has_synced() is True
        names = {rec.next()[1].metadata.name for _ in range(2)}
        assert names == {"one", "two"}
    finally:
        informer.stop()


def test_filters_other_namespaces():
    store = IPAMStore()
    store.create(make_ipam("other", namespace="b"))
    rec = Recorder()
    informer = IPAMInformer(store, "a", rec.handlers)
    informer.start()
    try:
        store.create(make_ipam("skip", namespace="b"))
        store.create(make_ipam("keep", namespace="a"))
        kind, obj = rec.next()
        assert kind == "add"
        assert obj.metadata.name == "keep"
        assert obj.metadata.namespace == "a"
    finally:
        informer.stop()


def test_all_namespaces_when_empty():
    store = IPAMStore()
    rec = Recorder()
    informer = IPAMInformer(store, "", rec.handlers)
    informer.start()
    try:
        store.create(make_ipam("x", namespace="a"))
        store.create(make_ipam("y", namespace="b"))
        namespaces = {rec.next()[1].metadata.namespace for _ in range(2)}
        assert namespaces == {"a", "b"}
    finally:
        informer.stop()


def test_update_reports_old_and_new():
    store = IPAMStore()
    store.create(make_ipam("one", host="foo.com"))
    rec = Recorder()
    informer = IPAMInformer(store, "default", rec.handlers)
    informer.start()
    try:
        assert rec.next()[0] == "add"
        current = store.get("default", "one")
        changed = IPAM(
            metadata=current.metadata,
            spec=IPAMSpec(host_specs=[HostSpec(host="bar.com")]),
            status=current.status,
        )
        store.update(changed)
        kind, old, new = rec.next()
        assert kind == "update"
        assert old.spec.host_specs[0].host == "foo.com"
        assert new.spec.host_specs[0].host == "bar.com"
    finally:
        informer.stop()


def test_delete_reported():
    store = IPAMStore()
    store.create(make_ipam("one"))
    rec = Recorder()
    informer = IPAMInformer(store, "default", rec.handlers)
    informer.start()
    try:
        rec.next()
        store.delete("default", "one")
        kind, obj = rec.next()
        assert kind == "delete"
        assert obj.metadata.name == "one"
    finally:
        informer.stop()


def test_failing_handler_does_not_stop_informer():
    store = IPAMStore()
    seen = queue.Queue()

    def add(obj):
        if obj.metadata.name == "bad":
            raise RuntimeError("boom")
        seen.put(obj)

    informer = IPAMInformer(store, "default", EventHandlers(add_func=add))
    informer.start()
    try:
        store.create(make_ipam("bad"))
        store.create(make_ipam("good", host="good.example.com"))
        delivered = seen.get(timeout=5)
        assert delivered.metadata.name == "good"
        assert delivered.spec.host_specs[0].host == "good.example.com"
        assert informer.has_synced() is True
    finally:
        informer.stop()


def test_restart_delivers_objects_again():
    store = IPAMStore()
    store.create(make_ipam("one"))
    rec = Recorder()
    informer = IPAMInformer(store, "default", rec.handlers)
    informer.start()
    assert rec.next()[1].metadata.name == "one"
    informer.stop()
    informer.start()
    try:
        kind, obj = rec.next()
        assert kind == "add"
        assert obj.metadata.name == "one"
    finally:
        informer.stop()