# simplydns

Manage the DNS records of a Simply.com zone from Python.

`simplydns` talks to the Simply.com API and gives you a provider with four
operations: list the records of a zone, append records, set record sets and
delete records.

## Installation

```
pip install simplydns
```

## Usage

```python
from datetime import timedelta

from simplydns.provider import Provider
from simplydns.records import MX, TXT, Address

provider = Provider(account_name="example", api_key="placeholder")

zone = "example.com."

for record in provider.get_records(zone):
    print(record.rr())

added = provider.append_records(zone, [
    TXT(name="_acme-challenge", ttl=timedelta(seconds=300), text="token"),
])

provider.set_records(zone, [
    Address(name="www", ttl=timedelta(hours=1), ip="192.0.2.1"),
    MX(name="@", ttl=timedelta(hours=1), preference=10, target="mail.example.com."),
])

deleted = provider.delete_records(zone, added)
```

Record TTLs are `datetime.timedelta` values; the API stores whole seconds.

`Provider` takes these settings:

- `account_name` – the Simply.com account name.
- `api_key` – the API key of the account.
- `base_url` – the base URL of the API, `https://api.simply.com/2/` by default.
- `max_retries` – how many times a request is retried when the API answers
  with HTTP 429; 3 by default, a negative number retries without limit. The
  wait follows the `x-ratelimit-retry-after` header, or doubles each time
  (2, 4, 8 … seconds) when the header is missing.
- `client` (keyword only) – any object with the methods `get_dns_records`,
  `add_dns_record`, `update_dns_record` and `delete_dns_record`, used instead
  of the built-in HTTP client.

The HTTP client, `simplydns.client.SimplyApiClient`, can also be used on its
own. Besides the settings above it accepts a `requests.Session` (`session`),
a request `timeout`, and the `sleep` function used while waiting between
retries.

### Semantics

- `get_records` returns every record of the zone, with names relative to the
  zone (`@` for the apex).
- `append_records` creates every given record and returns the created records
  as the zone now holds them.
- `set_records` makes each (name, type) set given in the input consist of
  exactly the input records: existing records are updated in place, surplus
  ones deleted and missing ones created. Other sets are left alone. It returns
  the records that were updated or created. The calls are not atomic; if one
  fails, earlier changes stay applied.
- `delete_records` removes the zone records that match the input and returns
  them. The name must always match; type, TTL and data are compared only when
  given (an empty type, a zero TTL or empty data match anything).
- `get_records_by_id` returns the zone records whose ids are in a given set.

`simplydns.provider.plan_set_records_changes` and `is_record_match` expose the
planning and matching rules that `set_records` and `delete_records` use.

### Errors

The client raises `simplydns.client.SimplyApiError`, carrying the API's error
message and `status_code`. Provider operations raise
`simplydns.provider.ProviderError`, chained to the underlying error; when
`delete_records` fails part way, the error's `records` attribute holds the
records already deleted. Records that cannot be converted raise
`simplydns.records.RecordParseError`.

### Record types

`simplydns.records` holds `Address` (A/AAAA), `CNAME`, `MX`, `NS`, `SRV`,
`TXT`, `CAA`, and the generic `RR`, whose `parse()` turns it into the typed
record (other types stay as `RR`). Every record has `rr()`, which gives its
generic form. `absolute_name` and `relative_name` convert names relative to a
zone.

`simplydns.models` holds `SimplyRecord` and `SimplyRecordResponse`, the shapes
the API uses, with `to_simply` and `SimplyRecordResponse.to_libdns` converting
to and from the generic records.

## What it does not do

There is no command-line tool; the package is a library. DNSSEC-related
record types get no special handling.

## Running the tests

```
pip install -e ".[test]"
pytest
```