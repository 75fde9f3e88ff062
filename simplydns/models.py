"""Record shapes used by the Simply.com API and conversions to generic records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from .records import (
    MX,
    RR,
    SRV,
    Record,
    RecordParseError,
    absolute_name,
    relative_name,
)


@dataclass(kw_only=True)
class SimplyRecord:
    """A DNS record as the Simply.com API sends and receives it."""

    name: str
    ttl: int
    data: str
    type: str
    priority: int | None = None
    comment: str = ""

    def to_json(self) -> dict[str, Any]:
        """Return the JSON body for this record, omitting empty optional fields."""
        body: dict[str, Any] = {
            "name": self.name,
            "ttl": self.ttl,
            "data": self.data,
            "type": self.type,
        }
        if self.priority is not None:
            body["priority"] = self.priority
        if self.comment:
            body["comment"] = self.comment
        return body


@dataclass(kw_only=True)
class SimplyRecordResponse(SimplyRecord):
    """A record returned by the API, carrying its record id."""

    id: int = 0

    def to_json(self) -> dict[str, Any]:
        body = super().to_json()
        body["record_id"] = self.id
        return body

    def to_libdns(self, zone: str) -> Record:
        """Convert to a generic record; names are made relative to ``zone``."""
        ttl = timedelta(seconds=self.ttl)
        if self.type == "MX":
            # The API keeps the MX preference apart from the data field.
            if self.priority is None:
                raise RecordParseError(f"MX record {self.id} has no priority")
            return MX(name=self.name, ttl=ttl, target=self.data, preference=self.priority)
        if self.type == "SRV":
            # The API keeps the SRV priority apart from the data field.
            if self.priority is None:
                raise RecordParseError(f"SRV record {self.id} has no priority")
            return RR(
                name=absolute_name(self.name, zone),
                type=self.type,
                data=f"{self.priority} {self.data}",
                ttl=ttl,
            ).parse()
        return RR(
            name=relative_name(self.name, zone),
            type=self.type,
            data=self.data,
            ttl=ttl,
        ).parse()


def record_from_json(data: dict[str, Any]) -> SimplyRecordResponse:
    """Build a record response from an API JSON object."""
    priority = data.get("priority")
    return SimplyRecordResponse(
        id=int(data.get("record_id", 0)),
        name=data.get("name", ""),
        ttl=int(data.get("ttl", 0)),
        data=data.get("data", ""),
        type=data.get("type", ""),
        priority=None if priority is None else int(priority),
        comment=data.get("comment", "") or "",
    )


def to_simply(record: Record) -> SimplyRecord:
    """Convert a generic record into the API's record shape."""
    if isinstance(record, MX):
        return SimplyRecord(
            name=record.name,
            ttl=int(record.ttl.total_seconds()),
            data=record.target,
            type="MX",
            priority=record.preference,
        )
    if isinstance(record, SRV):
        return SimplyRecord(
            name=record.rr().name,
            ttl=int(record.ttl.total_seconds()),
            data=f"{record.weight} {record.port} {record.target}",
            type="SRV",
            priority=record.priority,
        )
    rr = record.rr()
    return SimplyRecord(
        name=rr.name,
        ttl=int(rr.ttl.total_seconds()),
        data=rr.data,
        type=rr.type,
    )