"""
Subscription field normalization.

A subscriber's subscription field has been stored in four shapes over time:

* a native list: ``["Viki Pass|2024-05-01T00:00:00Z", "IQIYI"]``
* a single legacy string: ``"Viki Pass"``
* a comma-joined legacy string, optionally braced and quoted the way a
  Postgres text array prints: ``'{"Viki Pass","IQIYI"}'``
* a plus-joined legacy string: ``"Viki Pass+IQIYI"``

``classify_subscriptions`` tags the raw value with its encoding and
``normalize_subscriptions`` dispatches on the tag, always producing an
ordered list of ``service`` or ``service|timestamp`` strings.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple, Sequence

from ..constants import COMMA_SEPARATOR, PLUS_SEPARATOR, SUBSCRIPTION_TIMESTAMP_SEPARATOR
from ..enums import SubscriptionEncoding
from ..utils.time_utils import parse_timestamp


class SubscriptionEntry(NamedTuple):
    """One subscribed service and the moment it was activated."""

    service: str
    activated_at: datetime


def _strip_braces(value: str) -> str:
    if value.startswith("{"):
        value = value[1:]
    if value.endswith("}"):
        value = value[:-1]
    return value


def _clean_element(element: str) -> str:
    element = element.strip()
    if element.startswith('"'):
        element = element[1:]
    if element.endswith('"'):
        element = element[:-1]
    return element.strip()


def classify_subscriptions(raw: Any) -> SubscriptionEncoding:
    """Tag a raw subscription field with the encoding it was stored in."""
    if isinstance(raw, list):
        return SubscriptionEncoding.NATIVE_LIST
    if not isinstance(raw, str):
        return SubscriptionEncoding.MALFORMED

    body = _strip_braces(raw)
    if not body:
        return SubscriptionEncoding.EMPTY
    if COMMA_SEPARATOR in body:
        return SubscriptionEncoding.COMMA_JOINED
    if PLUS_SEPARATOR in body:
        return SubscriptionEncoding.PLUS_JOINED
    return SubscriptionEncoding.SINGLE


def _split_on(separator: str) -> Callable[[Any], List[str]]:
    def parse(raw: str) -> List[str]:
        return [_clean_element(part) for part in _strip_braces(raw).split(separator)]

    return parse


_PARSERS: Dict[SubscriptionEncoding, Callable[[Any], List[str]]] = {
    SubscriptionEncoding.NATIVE_LIST: lambda raw: raw,
    SubscriptionEncoding.SINGLE: lambda raw: [_clean_element(_strip_braces(raw))],
    SubscriptionEncoding.COMMA_JOINED: _split_on(COMMA_SEPARATOR),
    SubscriptionEncoding.PLUS_JOINED: _split_on(PLUS_SEPARATOR),
    SubscriptionEncoding.EMPTY: lambda raw: [],
    SubscriptionEncoding.MALFORMED: lambda raw: [],
}


def normalize_subscriptions(raw: Any) -> List[str]:
    """
    Canonicalize a subscription field into an ordered list of entry strings.

    A native list is returned as-is. Malformed input (neither a list nor a
    string) yields an empty list rather than an error.
    """
    return _PARSERS[classify_subscriptions(raw)](raw)


def entry_service(entry: str) -> str:
    """Service part of an entry string (text before the first ``|``), trimmed."""
    return entry.split(SUBSCRIPTION_TIMESTAMP_SEPARATOR, 1)[0].strip()


def entry_timestamp(entry: str) -> str:
    """Timestamp part of an entry string, or an empty string when absent."""
    parts = entry.split(SUBSCRIPTION_TIMESTAMP_SEPARATOR, 1)
    return parts[1].strip() if len(parts) > 1 else ""


def service_names(raw: Any) -> List[str]:
    """Non-empty service names of a subscription field, in stored order."""
    names = []
    for entry in normalize_subscriptions(raw):
        if not isinstance(entry, str):
            continue
        name = entry_service(entry)
        if name:
            names.append(name)
    return names


def parse_subscription_entries(raw: Any, purchase_date: datetime) -> List[SubscriptionEntry]:
    """
    Pair every subscribed service with its activation timestamp.

    Entries without a per-service timestamp (or with one that does not
    parse) are activated at the subscriber's purchase date.
    """
    entries = []
    for entry in normalize_subscriptions(raw):
        if not isinstance(entry, str):
            continue
        service = entry_service(entry)
        if not service:
            continue
        activated_at = parse_timestamp(entry_timestamp(entry)) or parse_timestamp(purchase_date)
        entries.append(SubscriptionEntry(service, activated_at))
    return entries


def has_service(raw: Any, service_name: str) -> bool:
    """True when any entry's service part contains ``service_name`` (case-insensitive)."""
    target = service_name.lower()
    return any(target in name.lower() for name in service_names(raw))


def encode_subscriptions(entries: Sequence[str], encoding: SubscriptionEncoding) -> Any:
    """
    Write a list of entry strings in the given storage encoding.

    Used when writing rows back and for exercising the legacy readers.
    """
    if encoding == SubscriptionEncoding.NATIVE_LIST:
        return list(entries)
    if encoding == SubscriptionEncoding.COMMA_JOINED:
        return "{" + COMMA_SEPARATOR.join(f'"{entry}"' for entry in entries) + "}"
    if encoding == SubscriptionEncoding.PLUS_JOINED:
        return PLUS_SEPARATOR.join(entries)
    if encoding == SubscriptionEncoding.SINGLE:
        if len(entries) != 1:
            raise ValueError("single encoding holds exactly one entry")
        return entries[0]
    if encoding == SubscriptionEncoding.EMPTY:
        return ""
    raise ValueError(f"cannot encode subscriptions as {encoding.value}")
