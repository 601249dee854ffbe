"""Tests for merging a phone number's rows into one profile."""

from datetime import datetime, timezone

from stream_share_core.constants import DEFAULT_CLIENT_NAME
from stream_share_core.processing.subscriber_profile import build_subscriber_profile

MARCH = datetime(2024, 3, 1, tzinfo=timezone.utc)
MAY = datetime(2024, 5, 1, tzinfo=timezone.utc)


class TestBuildSubscriberProfile:
    def test_no_rows(self):
        assert build_subscriber_profile([]) is None

    def test_all_rows_deleted(self, make_subscriber):
        rows = [make_subscriber(deleted=True), make_subscriber(deleted=True)]
        assert build_subscriber_profile(rows) is None

    def test_merges_live_rows(self, make_subscriber):
        phone = "5511988887777"
        older = make_subscriber(
            ["Viki Pass|2024-03-01T00:00:00Z"],
            phone_number=phone,
            client_name="Ana",
            purchase_date=MARCH,
            duration_months=1,
            is_debtor=True,
        )
        newer = make_subscriber(
            "IQIYI+Kocowa",
            phone_number=phone,
            client_name="Ana Maria",
            purchase_date=MAY,
            duration_months=3,
            manual_credentials={"IQIYI": "cred-9"},
        )
        trashed = make_subscriber(["WeTV"], phone_number=phone, deleted=True)

        profile = build_subscriber_profile([older, trashed, newer])

        assert profile.id == newer.id
        assert profile.name == "Ana Maria"
        assert profile.purchase_date == MAY
        assert profile.duration_months == 3
        assert profile.services == ["Viki Pass", "IQIYI", "Kocowa"]
        assert profile.is_debtor is True
        assert profile.manual_credentials == {"IQIYI": "cred-9"}

        viki = profile.subscription_details["Viki Pass"]
        assert viki.purchase_date == MARCH
        assert viki.duration_months == 1
        assert viki.is_debtor is True
        assert profile.subscription_details["Kocowa"].duration_months == 3

    def test_default_name(self, make_subscriber):
        profile = build_subscriber_profile([make_subscriber(client_name=None)])
        assert profile.name == DEFAULT_CLIENT_NAME

    def test_first_row_wins_expiry_tie(self, make_subscriber):
        first = make_subscriber(purchase_date=MAY)
        second = make_subscriber(purchase_date=MAY)

        assert build_subscriber_profile([first, second]).id == first.id
