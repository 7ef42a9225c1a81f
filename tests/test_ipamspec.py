import pytest

from ipamctl.ipamspec import IPAMRequest, IPAMResponse, Operation


def test_operation_looked_up_by_value():
    assert Operation("Create") is Operation.CREATE
    assert Operation("Delete") is Operation.DELETE


def test_operation_str_is_value():
    request = IPAMRequest(operation=Operation.DELETE)
    assert str(request.operation) == "Delete"
    assert f"{request.operation}" == "Delete"


@pytest.mark.parametrize("raw, expected", [("Create", Operation.CREATE), ("Delete", Operation.DELETE)])
def test_string_operation_is_normalised(raw, expected):
    request = IPAMRequest(operation=raw)
    assert request.operation is expected


def test_unknown_operation_is_kept_as_given():
    request = IPAMRequest(operation="Resize")
    assert request.operation == "Resize"
    assert not isinstance(request.operation, Operation)


def test_request_string_format():
    request = IPAMRequest(
        operation=Operation.CREATE,
        host_name="foo.com",
        ip_addr="1.2.3.4",
        key="k",
        ipam_label="Dev",
    )
    assert str(request) == (
        "\nHostname: foo.com\tKey: k\tIPAMLabel: Dev\tIPAddr: 1.2.3.4\tOperation: Create\n"
    )


def test_request_string_with_defaults():
    assert str(IPAMRequest()) == "\nHostname: \tKey: \tIPAMLabel: \tIPAddr: \tOperation: \n"


def test_response_defaults_and_fields():
    request = IPAMRequest(operation=Operation.DELETE, key="Test")
    response = IPAMResponse(request=request)
    assert response.request is request
    assert response.ip_addr == ""
    assert response.status is False


def test_requests_compare_by_value():
    first = IPAMRequest(operation="Create", host_name="foo.com", ipam_label="Dev")
    second = IPAMRequest(operation=Operation.CREATE, host_name="foo.com", ipam_label="Dev")
    assert first == second