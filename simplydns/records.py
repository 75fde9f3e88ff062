"""Generic DNS record types and the helpers that convert between them."""

from __future__ import annotations

import ipaddress
import json
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_UINT16_MAX = 0xFFFF
_UINT8_MAX = 0xFF


class RecordParseError(ValueError):
    """Raised when a resource record cannot be turned into a typed record."""


def _parse_uint(text: str, limit: int, what: str) -> int:
    try:
        value = int(text, 10)
    except ValueError as exc:
        raise RecordParseError(f"invalid {what}: {text!r}") from exc
    if not 0 <= value <= limit:
        raise RecordParseError(f"{what} out of range: {value}")
    return value


@dataclass(frozen=True, kw_only=True)
class RR:
    """A raw resource record: name, type, data and TTL."""

    name: str
    type: str = ""
    data: str = ""
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        return self

    def parse(self) -> Record:
        """Return the typed record for this RR, or the RR itself for unknown types."""
        parser = _PARSERS.get(self.type)
        if parser is None:
            return self
        return parser(self)

    def _to_address(self) -> Address:
        try:
            ip = ipaddress.ip_address(self.data.strip())
        except ValueError as exc:
            raise RecordParseError(f"invalid IP address: {self.data!r}") from exc
        expected = "A" if ip.version == 4 else "AAAA"
        if expected != self.type:
            raise RecordParseError(
                f"address {self.data!r} does not fit record type {self.type}"
            )
        return Address(name=self.name, ttl=self.ttl, ip=ip)

    def _to_cname(self) -> CNAME:
        return CNAME(name=self.name, ttl=self.ttl, target=self.data)

    def _to_ns(self) -> NS:
        return NS(name=self.name, ttl=self.ttl, target=self.data)

    def _to_txt(self) -> TXT:
        return TXT(name=self.name, ttl=self.ttl, text=self.data)

    def _to_mx(self) -> MX:
        fields = self.data.split()
        if len(fields) != 2:
            raise RecordParseError(
                "malformed MX value; expected 2 fields in the form 'preference target'"
            )
        preference = _parse_uint(fields[0], _UINT16_MAX, "MX preference")
        return MX(name=self.name, ttl=self.ttl, preference=preference, target=fields[1])

    def _to_srv(self) -> SRV:
        parts = self.name.split(".", 2)
        if len(parts) < 2 or not parts[0].startswith("_") or not parts[1].startswith("_"):
            raise RecordParseError(
                f"SRV name {self.name!r} must start with '_service._transport'"
            )
        service, transport = parts[0][1:], parts[1][1:]
        name = parts[2] if len(parts) == 3 else ""
        fields = self.data.split()
        if len(fields) != 4:
            raise RecordParseError(
                "malformed SRV value; expected 4 fields in the form "
                "'priority weight port target'"
            )
        priority = _parse_uint(fields[0], _UINT16_MAX, "SRV priority")
        weight = _parse_uint(fields[1], _UINT16_MAX, "SRV weight")
        port = _parse_uint(fields[2], _UINT16_MAX, "SRV port")
        return SRV(
            service=service,
            transport=transport,
            name=name,
            ttl=self.ttl,
            priority=priority,
            weight=weight,
            port=port,
            target=fields[3],
        )

    def _to_caa(self) -> CAA:
        fields = self.data.split(None, 2)
        if len(fields) != 3:
            raise RecordParseError(
                "malformed CAA value; expected 3 fields in the form 'flags tag \"value\"'"
            )
        flags = _parse_uint(fields[0], _UINT8_MAX, "CAA flags")
        value = fields[2]
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            try:
                value = json.loads(value)
            except ValueError:
                value = value[1:-1]
        return CAA(name=self.name, ttl=self.ttl, flags=flags, tag=fields[1], value=value)


_PARSERS = {
    "A": RR._to_address,
    "AAAA": RR._to_address,
    "CNAME": RR._to_cname,
    "NS": RR._to_ns,
    "TXT": RR._to_txt,
    "MX": RR._to_mx,
    "SRV": RR._to_srv,
    "CAA": RR._to_caa,
}


@dataclass(frozen=True, kw_only=True)
class Address:
    """An A or AAAA record; the type follows from the IP version."""

    name: str
    ip: IPAddress
    ttl: timedelta = field(default_factory=timedelta)

    def __post_init__(self) -> None:
        if isinstance(self.ip, str):
            object.__setattr__(self, "ip", ipaddress.ip_address(self.ip))

    def rr(self) -> RR:
        record_type = "A" if self.ip.version == 4 else "AAAA"
        return RR(name=self.name, type=record_type, data=str(self.ip), ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class CNAME:
    """A canonical-name record."""

    name: str
    target: str
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        return RR(name=self.name, type="CNAME", data=self.target, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class MX:
    """A mail-exchange record."""

    name: str
    target: str
    preference: int = 0
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        return RR(
            name=self.name,
            type="MX",
            data=f"{self.preference} {self.target}",
            ttl=self.ttl,
        )


@dataclass(frozen=True, kw_only=True)
class NS:
    """A name-server record."""

    name: str
    target: str
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        return RR(name=self.name, type="NS", data=self.target, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class SRV:
    """A service record; its owner name is built from service, transport and name."""

    service: str
    transport: str
    name: str
    target: str
    priority: int = 0
    weight: int = 0
    port: int = 0
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        prefix = f"_{self.service}._{self.transport}"
        owner = prefix if self.name in ("", "@") else f"{prefix}.{self.name}"
        return RR(
            name=owner,
            type="SRV",
            data=f"{self.priority} {self.weight} {self.port} {self.target}",
            ttl=self.ttl,
        )


@dataclass(frozen=True, kw_only=True)
class TXT:
    """A text record."""

    name: str
    text: str
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        return RR(name=self.name, type="TXT", data=self.text, ttl=self.ttl)


@dataclass(frozen=True, kw_only=True)
class CAA:
    """A certification-authority-authorization record."""

    name: str
    tag: str
    value: str
    flags: int = 0
    ttl: timedelta = field(default_factory=timedelta)

    def rr(self) -> RR:
        quoted = json.dumps(self.value, ensure_ascii=False)
        return RR(
            name=self.name,
            type="CAA",
            data=f"{self.flags} {self.tag} {quoted}",
            ttl=self.ttl,
        )


Record = Union[RR, Address, CNAME, MX, NS, SRV, TXT, CAA]


def absolute_name(name: str, zone: str) -> str:
    """Return the fully-qualified form of ``name`` inside ``zone``."""
    if not zone:
        return name.strip(".")
    if name in ("", "@"):
        return zone
    if name.endswith("."):
        return name
    return f"{name}.{zone}"


def relative_name(name: str, zone: str) -> str:
    """Return ``name`` relative to ``zone``; the zone apex becomes ``@``."""
    fqdn = name.removesuffix(".")
    bare_zone = zone.removesuffix(".")
    if not bare_zone:
        return fqdn
    if fqdn == bare_zone:
        return "@"
    suffix = "." + bare_zone
    if fqdn.endswith(suffix):
        return fqdn[: -len(suffix)]
    return fqdn