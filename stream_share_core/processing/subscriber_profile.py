"""
Merge the rows stored under one phone number into a single profile.

A subscriber who bought several services at different times can own more
than one client row. The profile unions their services and takes the headline
purchase/duration from the row that expires last.
"""

from typing import Dict, List, Optional, Sequence

from ..constants import DEFAULT_CLIENT_NAME
from ..distribution.subscriptions import service_names
from ..schemas.subscriber_schema import SubscriberProfile, SubscriberRead, SubscriptionDetail
from .subscriber_lifecycle import subscription_expiry


def build_subscriber_profile(rows: Sequence[SubscriberRead]) -> Optional[SubscriberProfile]:
    """
    Build the merged profile for one phone number.

    Soft-deleted rows are ignored. Returns None when there are no rows or
    every row is deleted.
    """
    live_rows = [row for row in rows if not row.deleted]
    if not live_rows:
        return None

    services: Dict[str, None] = {}
    details: Dict[str, SubscriptionDetail] = {}
    best_row = live_rows[0]
    best_expiry = None

    for row in live_rows:
        for name in service_names(row.subscriptions):
            services[name] = None
            details[name] = SubscriptionDetail(
                purchase_date=row.purchase_date,
                duration_months=row.duration_months,
                is_debtor=row.is_debtor,
            )

        expiry = subscription_expiry(row.purchase_date, row.duration_months)
        if best_expiry is None or expiry > best_expiry:
            best_expiry = expiry
            best_row = row

    merged_services: List[str] = list(services)
    return SubscriberProfile(
        id=best_row.id,
        phone_number=best_row.phone_number,
        name=best_row.client_name or DEFAULT_CLIENT_NAME,
        purchase_date=best_row.purchase_date,
        duration_months=best_row.duration_months,
        services=merged_services,
        subscription_details=details,
        is_debtor=any(row.is_debtor for row in live_rows),
        manual_credentials=dict(best_row.manual_credentials),
    )
