from datetime import timedelta

import pytest

from simplydns.models import (
    SimplyRecord,
    SimplyRecordResponse,
    record_from_json,
    to_simply,
)
from simplydns.records import (
    CAA,
    CNAME,
    MX,
    NS,
    RR,
    SRV,
    TXT,
    Address,
    RecordParseError,
)

ZONE = "example.com."


def _seconds(n):
    return timedelta(seconds=n)


@pytest.mark.parametrize(
    "response, name, rtype, value, ttl",
    [
        (
            SimplyRecordResponse(id=123, name="www", type="A", data="192.0.2.1", ttl=3600),
            "www", "A", "192.0.2.1", 3600,
        ),
        (
            SimplyRecordResponse(id=124, name="ipv6", type="AAAA", data="2001:db8::1", ttl=7200),
            "ipv6", "AAAA", "2001:db8::1", 7200,
        ),
        (
            SimplyRecordResponse(
                id=125, name="alias", type="CNAME", data="target.example.com.", ttl=3600
            ),
            "alias", "CNAME", "target.example.com.", 3600,
        ),
        (
            SimplyRecordResponse(
                id=126, name="@", type="MX", data="mail.example.com.", ttl=3600, priority=10
            ),
            "@", "MX", "10 mail.example.com.", 3600,
        ),
        (
            SimplyRecordResponse(
                id=127,
                name="txt",
                type="TXT",
                data="v=spf1 include:_spf.example.com ~all",
                ttl=3600,
            ),
            "txt", "TXT", "v=spf1 include:_spf.example.com ~all", 3600,
        ),
        (
            SimplyRecordResponse(
                id=129, name="subdomain", type="NS", data="ns1.example.com.", ttl=86400
            ),
            "subdomain", "NS", "ns1.example.com.", 86400,
        ),
    ],
)
def test_to_libdns(response, name, rtype, value, ttl):
    rr = response.to_libdns(ZONE).rr()
    assert rr.name == name
    assert rr.type == rtype
    assert rr.data == value
    assert rr.ttl == _seconds(ttl)


TO_SIMPLY_CASES = [
    (Address(name="www", ttl=_seconds(3600), ip="192.0.2.1"), "www", "A", "192.0.2.1", 3600, None),
    (
        Address(name="ipv6", ttl=_seconds(7200), ip="2001:db8::1"),
        "ipv6", "AAAA", "2001:db8::1", 7200, None,
    ),
    (
        CNAME(name="alias", ttl=_seconds(3600), target="target.example.com."),
        "alias", "CNAME", "target.example.com.", 3600, None,
    ),
    (
        MX(name="mail", ttl=_seconds(3600), preference=10, target="mail.example.com."),
        "mail", "MX", "mail.example.com.", 3600, 10,
    ),
    (
        NS(name="subdomain", ttl=_seconds(86400), target="ns1.example.com."),
        "subdomain", "NS", "ns1.example.com.", 86400, None,
    ),
    (
        SRV(
            service="sip",
            transport="tcp",
            name="example.com.",
            ttl=_seconds(3600),
            priority=10,
            weight=5,
            port=5060,
            target="sipserver.example.com.",
        ),
        "_sip._tcp.example.com.", "SRV", "5 5060 sipserver.example.com.", 3600, 10,
    ),
    (
        TXT(name="txt", ttl=_seconds(3600), text="v=spf1 include:_spf.example.com ~all"),
        "txt", "TXT", "v=spf1 include:_spf.example.com ~all", 3600, None,
    ),
    (
        CAA(name="caa", ttl=_seconds(3600), flags=0, tag="issue", value="letsencrypt.org"),
        "caa", "CAA", '0 issue "letsencrypt.org"', 3600, None,
    ),
]


@pytest.mark.parametrize("record, name, rtype, data, ttl, priority", TO_SIMPLY_CASES)
def test_to_simply(record, name, rtype, data, ttl, priority):
    result = to_simply(record)
    assert result.name == name
    assert result.type == rtype
    assert result.data == data
    assert result.ttl == ttl
    if priority is not None:
        assert result.priority == priority


@pytest.mark.parametrize("record", [case[0] for case in TO_SIMPLY_CASES])
def test_round_trip_conversions(record):
    simply = to_simply(record)
    response = SimplyRecordResponse(
        id=12345,
        name=simply.name,
        ttl=simply.ttl,
        data=simply.data,
        type=simply.type,
        priority=simply.priority,
    )
    result = response.to_libdns(ZONE).rr()
    original = record.rr()
    assert result.type == original.type
    assert result.name == original.name
    assert result.data == original.data
    assert result.ttl == original.ttl


def test_to_simply_plain_rr():
    result = to_simply(RR(name="www", type="A", data="192.0.2.1", ttl=_seconds(3600)))
    assert result == SimplyRecord(name="www", ttl=3600, data="192.0.2.1", type="A")


def test_to_json_omits_empty_optionals():
    body = SimplyRecord(name="www", ttl=3600, data="192.0.2.1", type="A").to_json()
    assert set(body) == {"name", "ttl", "data", "type"}


def test_to_json_includes_priority_and_comment():
    body = SimplyRecord(
        name="mail", ttl=3600, data="mail.example.com.", type="MX", priority=10, comment="primary"
    ).to_json()
    assert body["priority"] == 10
    assert body["comment"] == "primary"


def test_record_from_json_round_trip():
    original = SimplyRecordResponse(
        id=1002, name="mail", type="MX", data="mail.example.com.", ttl=3600, priority=10
    )
    assert record_from_json(original.to_json()) == original


def test_record_from_json_reads_record_id():
    response = record_from_json(
        {"record_id": 1001, "name": "www", "type": "A", "data": "192.0.2.1", "ttl": 3600}
    )
    assert response.id == 1001
    assert response.priority is None
    assert response.to_libdns(ZONE) == Address(name="www", ttl=_seconds(3600), ip="192.0.2.1")


def test_mx_without_priority_is_an_error():
    response = SimplyRecordResponse(id=1, name="@", type="MX", data="mail.example.com.", ttl=60)
    with pytest.raises(RecordParseError):
        response.to_libdns(ZONE)


def test_invalid_data_is_an_error():
    response = SimplyRecordResponse(id=1, name="www", type="A", data="bogus", ttl=60)
    with pytest.raises(RecordParseError):
        response.to_libdns(ZONE)


def test_mx_conversion_gives_mx_record():
    response = SimplyRecordResponse(
        id=1002, name="mail", type="MX", data="mail.example.com.", ttl=3600, priority=10
    )
    result = response.to_libdns(ZONE)
    assert isinstance(result, MX)
    assert result.preference == 10