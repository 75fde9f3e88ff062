"""High-level record management for zones hosted at Simply.com."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Protocol, Sequence

import requests

from .client import DEFAULT_BASE_URL, DEFAULT_MAX_RETRIES, SimplyApiClient, SimplyApiError
from .models import SimplyRecord, SimplyRecordResponse, to_simply
from .records import RR, Record, RecordParseError, absolute_name

_CLIENT_ERRORS = (SimplyApiError, requests.RequestException)


class ProviderError(Exception):
    """Raised when a zone operation fails.

    ``records`` holds whatever was already done before the failure, where
    the operation reports that (for example, records already deleted).
    """

    def __init__(self, message: str, records: Iterable[Record] | None = None) -> None:
        super().__init__(message)
        self.records: list[Record] = list(records) if records is not None else []


class _RecordClient(Protocol):
    def get_dns_records(self, zone: str) -> list[SimplyRecordResponse]: ...

    def add_dns_record(self, zone: str, record: SimplyRecord) -> int: ...

    def update_dns_record(self, zone: str, record_id: int, record: SimplyRecord) -> None: ...

    def delete_dns_record(self, zone: str, record_id: int) -> None: ...


class Operation(enum.Enum):
    """The kind of change planned for one record."""

    UPDATE = "update"
    DELETE = "delete"
    CREATE = "create"


@dataclass(frozen=True)
class PlannedChange:
    """One change to apply to a zone while setting records."""

    op: Operation
    record_id: int = 0
    record: SimplyRecord | None = None


def is_record_match(candidate: SimplyRecordResponse, criteria: RR, zone: str) -> bool:
    """Tell whether ``candidate`` matches ``criteria`` under the deletion rules.

    The name must always match; type, TTL and data are compared only when
    the criteria set them.
    """
    if absolute_name(candidate.name, zone) != absolute_name(criteria.name, zone):
        return False
    if criteria.type and candidate.type != criteria.type:
        return False
    if criteria.ttl != timedelta(0) and timedelta(seconds=candidate.ttl) != criteria.ttl:
        return False
    if criteria.data:
        try:
            converted = candidate.to_libdns(zone)
        except RecordParseError:
            return False
        if converted.rr().data != criteria.data:
            return False
    return True


def _group_existing(
    records: Iterable[SimplyRecordResponse],
) -> dict[tuple[str, str], list[SimplyRecordResponse]]:
    groups: dict[tuple[str, str], list[SimplyRecordResponse]] = {}
    for record in records:
        groups.setdefault((record.name, record.type), []).append(record)
    return groups


def _group_input(records: Iterable[Record]) -> dict[tuple[str, str], list[Record]]:
    groups: dict[tuple[str, str], list[Record]] = {}
    for record in records:
        rr = record.rr()
        groups.setdefault((rr.name, rr.type), []).append(record)
    return groups


def plan_set_records_changes(
    existing_records: Sequence[SimplyRecordResponse], input_records: Sequence[Record]
) -> list[PlannedChange]:
    """Work out the changes that make each input RRset the only one of its kind."""
    existing_by_key = _group_existing(existing_records)
    changes: list[PlannedChange] = []

    for key, input_set in _group_input(input_records).items():
        existing_set = existing_by_key.get(key, [])
        kept = min(len(existing_set), len(input_set))

        changes.extend(
            PlannedChange(Operation.UPDATE, existing.id, to_simply(wanted))
            for existing, wanted in zip(existing_set[:kept], input_set[:kept])
        )
        changes.extend(
            PlannedChange(Operation.DELETE, existing.id) for existing in existing_set[kept:]
        )
        changes.extend(
            PlannedChange(Operation.CREATE, record=to_simply(wanted))
            for wanted in input_set[kept:]
        )

    return changes


class Provider:
    """Manages the DNS records of zones in a Simply.com account."""

    def __init__(
        self,
        account_name: str = "",
        api_key: str = "",
        base_url: str = "",
        max_retries: int | None = None,
        *,
        client: _RecordClient | None = None,
    ) -> None:
        self.account_name = account_name
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self._client = client
        self._lock = threading.Lock()

    def _api(self) -> _RecordClient:
        if self._client is not None:
            return self._client
        with self._lock:
            if self._client is None:
                if not self.base_url:
                    self.base_url = DEFAULT_BASE_URL
                retries = DEFAULT_MAX_RETRIES if self.max_retries is None else self.max_retries
                self._client = SimplyApiClient(
                    account_name=self.account_name,
                    api_key=self.api_key,
                    base_url=self.base_url,
                    max_retries=retries,
                )
            return self._client

    def get_records(self, zone: str) -> list[Record]:
        """Return every record in ``zone``."""
        try:
            records = self._api().get_dns_records(zone)
        except _CLIENT_ERRORS as exc:
            raise ProviderError(f"failed to get DNS records for zone {zone}: {exc}") from exc

        result: list[Record] = []
        for record in records:
            try:
                result.append(record.to_libdns(zone))
            except RecordParseError as exc:
                raise ProviderError(
                    f"failed to convert DNS record (id: {record.id}) to libdns format: {exc}"
                ) from exc
        return result

    def append_records(self, zone: str, records: Sequence[Record]) -> list[Record]:
        """Add ``records`` to ``zone`` and return the records that were added."""
        api = self._api()
        added_ids: set[int] = set()
        for record in records:
            try:
                added_ids.add(api.add_dns_record(zone, to_simply(record)))
            except _CLIENT_ERRORS as exc:
                rr = record.rr()
                raise ProviderError(
                    f"failed to add DNS record {rr.type} {rr.name}: {exc}"
                ) from exc

        try:
            zone_records = api.get_dns_records(zone)
        except _CLIENT_ERRORS as exc:
            raise ProviderError(
                f"DNS records were added but failed to get DNS records for zone {zone}: {exc}"
            ) from exc

        added: list[Record] = []
        for record in zone_records:
            if record.id not in added_ids:
                continue
            try:
                added.append(record.to_libdns(zone))
            except RecordParseError as exc:
                raise ProviderError(
                    f"failed to convert added DNS record (id: {record.id}) "
                    f"to libdns format: {exc}"
                ) from exc
        return added

    def set_records(self, zone: str, records: Sequence[Record]) -> list[Record]:
        """Make the given records the only members of their RRsets in ``zone``.

        Returns the records that were updated or created. The changes are
        not atomic: after an error, some of them may already be applied.
        """
        api = self._api()
        try:
            existing = api.get_dns_records(zone)
        except _CLIENT_ERRORS as exc:
            raise ProviderError(
                f"failed to get existing DNS records for zone {zone}: {exc}"
            ) from exc

        changes = plan_set_records_changes(existing, records)

        try:
            affected = self._execute_changes(zone, changes)
        except ProviderError as exc:
            raise ProviderError(
                f"failed to execute DNS changes for zone {zone}: {exc}"
            ) from exc

        try:
            return self.get_records_by_id(zone, affected)
        except ProviderError as exc:
            raise ProviderError(
                f"failed to retrieve updated records for zone {zone}: {exc}"
            ) from exc

    def _execute_changes(self, zone: str, changes: Iterable[PlannedChange]) -> set[int]:
        api = self._api()
        affected: set[int] = set()
        for change in changes:
            if change.op is Operation.UPDATE:
                assert change.record is not None
                try:
                    api.update_dns_record(zone, change.record_id, change.record)
                except _CLIENT_ERRORS as exc:
                    raise ProviderError(
                        f"failed to update DNS record {change.record_id} in zone {zone}: {exc}"
                    ) from exc
                affected.add(change.record_id)
            elif change.op is Operation.DELETE:
                try:
                    api.delete_dns_record(zone, change.record_id)
                except _CLIENT_ERRORS as exc:
                    raise ProviderError(
                        f"failed to delete DNS record {change.record_id} in zone {zone}: {exc}"
                    ) from exc
            else:
                assert change.record is not None
                try:
                    affected.add(api.add_dns_record(zone, change.record))
                except _CLIENT_ERRORS as exc:
                    raise ProviderError(
                        f"failed to add DNS record ({change.record.type} "
                        f"{change.record.name}) in zone {zone}: {exc}"
                    ) from exc
        return affected

    def get_records_by_id(self, zone: str, record_ids: Iterable[int]) -> list[Record]:
        """Return the records of ``zone`` whose ids are in ``record_ids``."""
        wanted = set(record_ids)
        try:
            records = self._api().get_dns_records(zone)
        except _CLIENT_ERRORS as exc:
            raise ProviderError(
                f"failed to retrieve updated records for zone {zone}: {exc}"
            ) from exc

        result: list[Record] = []
        for record in records:
            if record.id not in wanted:
                continue
            try:
                result.append(record.to_libdns(zone))
            except RecordParseError as exc:
                raise ProviderError(
                    f"failed to convert affected DNS record (id: {record.id}) "
                    f"to libdns format: {exc}"
                ) from exc
        return result

    def delete_records(self, zone: str, records: Sequence[Record]) -> list[Record]:
        """Delete the zone records that match any of ``records``; return those deleted.

        Type, TTL and data may be left empty in the input to match any value.
        On failure the raised error carries the records deleted so far.
        """
        api = self._api()
        try:
            zone_records = api.get_dns_records(zone)
        except _CLIENT_ERRORS as exc:
            raise ProviderError(f"failed to get DNS records for zone {zone}: {exc}") from exc

        criteria = [record.rr() for record in records]
        deleted: list[Record] = []
        for zone_record in zone_records:
            try:
                converted = zone_record.to_libdns(zone)
            except RecordParseError as exc:
                raise ProviderError(
                    f"failed to convert zone record (id: {zone_record.id}) "
                    f"to libdns format: {exc}",
                    deleted,
                ) from exc

            if not any(is_record_match(zone_record, rr, zone) for rr in criteria):
                continue
            try:
                api.delete_dns_record(zone, zone_record.id)
            except _CLIENT_ERRORS as exc:
                raise ProviderError(
                    f"failed to delete DNS record {zone_record.id} in zone {zone}: {exc}",
                    deleted,
                ) from exc
            deleted.append(converted)

        return deleted