"""Tests for forward and reverse credential assignment."""

import random
from datetime import timedelta

import pytest

from stream_share_core.constants import AlertMessage
from stream_share_core.distribution.engine import (
    assign_credential,
    assigned_subscribers,
    build_credential_pool,
    build_roster,
    count_assigned_subscribers,
    merge_alerts,
    partition_roster,
    pool_index_for,
    roster_position,
    service_matches,
)
from stream_share_core.distribution.strategy import Strategy
from stream_share_core.enums import AssignmentStatus


@pytest.fixture
def now(base_time):
    # Two calendar days after the first credential: no age alert for any service
    return base_time + timedelta(days=1)


def _subscribers(make_subscriber, service, count):
    return [make_subscriber([service]) for _ in range(count)]


class TestPoolAndRoster:
    """Test the eligible pool and roster builders."""

    def test_service_matches_both_directions(self):
        assert service_matches("Viki", "Viki Pass")
        assert service_matches("viki pass", "VIKI")
        assert not service_matches("Kocowa", "Viki Pass")

    def test_pool_excludes_hidden_and_other_services(self, make_credential):
        visible = make_credential("Viki Pass")
        make_hidden = make_credential("Viki Pass", is_visible=False)
        other = make_credential("Kocowa")

        pool = build_credential_pool("Viki Pass", [visible, make_hidden, other])

        assert [c.id for c in pool] == [visible.id]

    def test_pool_sorted_by_published_at(self, make_credential, base_time):
        newest = make_credential("IQIYI", published_at=base_time + timedelta(days=3))
        oldest = make_credential("IQIYI", published_at=base_time)
        middle = make_credential("IQIYI", published_at=base_time + timedelta(days=1))

        pool = build_credential_pool("IQIYI", [newest, oldest, middle])

        assert [c.id for c in pool] == [oldest.id, middle.id, newest.id]

    def test_pool_ties_keep_input_order(self, make_credential, base_time):
        first = make_credential("IQIYI", published_at=base_time)
        second = make_credential("IQIYI", published_at=base_time)

        assert [c.id for c in build_credential_pool("IQIYI", [second, first])] == [
            second.id,
            first.id,
        ]

    def test_roster_excludes_deleted_and_sorts_by_phone(self, make_subscriber):
        b = make_subscriber(["Viki Pass"], phone_number="5511999990002")
        a = make_subscriber(["Viki Pass|2024-05-01T00:00:00Z"], phone_number="5511999990001")
        deleted = make_subscriber(["Viki Pass"], phone_number="5511999990000", deleted=True)
        other = make_subscriber(["Kocowa"], phone_number="5511999990003")

        roster = build_roster("Viki", [b, deleted, other, a])

        assert [s.id for s in roster] == [a.id, b.id]

    def test_roster_reads_legacy_encodings(self, make_subscriber):
        plus = make_subscriber("Kocowa+Viki Pass")
        comma = make_subscriber('{"IQIYI","Viki Pass"}')
        single = make_subscriber("Viki Pass")

        assert len(build_roster("Viki Pass", [plus, comma, single])) == 3

    def test_roster_position_ignores_phone_formatting(self, make_subscriber):
        roster = [
            make_subscriber(phone_number="5511900000001"),
            make_subscriber(phone_number="5511900000002"),
        ]
        lookup = make_subscriber(phone_number="+55 (11) 90000-0002")

        assert roster_position(lookup, roster) == 1

    def test_roster_position_missing(self, make_subscriber):
        roster = [make_subscriber(phone_number="5511900000001")]
        assert roster_position(make_subscriber(phone_number="5511900000009"), roster) is None


class TestPoolIndex:
    """Test the per-position strategy arithmetic."""

    def test_single(self):
        assert pool_index_for(7, 3, Strategy.single()) == (0, False)

    def test_round_robin(self):
        assert pool_index_for(5, 3, Strategy.round_robin()) == (2, False)

    @pytest.mark.parametrize(
        "position, expected",
        [(0, (0, False)), (3, (0, False)), (4, (1, False)), (7, (1, False)), (8, (0, True)), (9, (1, True))],
    )
    def test_bucket(self, position, expected):
        assert pool_index_for(position, 2, Strategy.bucket(4)) == expected


class TestAssignCredential:
    """Test forward assignment."""

    def test_bucket_boundary(self, make_credential, make_subscriber, now):
        credentials = [make_credential("Viki Pass"), make_credential("Viki Pass")]
        subscribers = _subscribers(make_subscriber, "Viki Pass", 9)

        results = [
            assign_credential(s, "Viki Pass", credentials, subscribers, now=now)
            for s in subscribers
        ]

        assert [r.credential.id for r in results[:4]] == ["cred-0"] * 4
        assert [r.credential.id for r in results[4:8]] == ["cred-1"] * 4
        assert all(r.alert is None for r in results[:8])
        assert all(r.status == AssignmentStatus.ASSIGNED for r in results[:8])

        overflow = results[8]
        assert overflow.credential.id == "cred-0"
        assert overflow.status == AssignmentStatus.OVERFLOW
        assert overflow.alert == AlertMessage.CAPACITY_EXCEEDED.value.format(service="Viki Pass")

    def test_stored_entry_string_as_service_name(self, make_credential, make_subscriber, now):
        entry = "Viki Pass|2024-05-01T00:00:00Z"
        credentials = [make_credential("Viki Pass"), make_credential("Viki Pass")]
        subscribers = _subscribers(make_subscriber, entry, 6)

        result = assign_credential(subscribers[5], entry, credentials, subscribers, now=now)

        assert result.status == AssignmentStatus.ASSIGNED
        assert result.credential.id == "cred-1"

        partition = partition_roster(entry, credentials, subscribers)
        assert [len(members) for members in partition.values()] == [4, 2]

    def test_overflow_alert_merged_with_age_alert(self, make_credential, make_subscriber, base_time):
        credentials = [make_credential("Viki Pass")]
        subscribers = _subscribers(make_subscriber, "Viki Pass", 5)

        result = assign_credential(
            subscribers[4], "Viki Pass", credentials, subscribers, now=base_time + timedelta(days=11)
        )

        capacity = AlertMessage.CAPACITY_EXCEEDED.value.format(service="Viki Pass")
        age = AlertMessage.VIKI_FINAL_CYCLE.value.format(days=12)
        assert result.alert == f"{capacity} | {age}"
        assert result.days_active == 12

    def test_custom_alert_separator(self, make_credential, make_subscriber, base_time):
        credentials = [make_credential("Viki Pass")]
        subscribers = _subscribers(make_subscriber, "Viki Pass", 5)

        result = assign_credential(
            subscribers[4],
            "Viki Pass",
            credentials,
            subscribers,
            now=base_time + timedelta(days=11),
            alert_separator=" // ",
        )

        assert " // " in result.alert

    def test_round_robin(self, make_credential, make_subscriber, now):
        credentials = [make_credential("IQIYI") for _ in range(3)]
        subscribers = _subscribers(make_subscriber, "IQIYI", 7)

        result = assign_credential(subscribers[5], "IQIYI", credentials, subscribers, now=now)

        assert result.credential.id == "cred-2"
        assert result.alert is None

    def test_round_robin_never_overflows(self, make_credential, make_subscriber, now):
        credentials = [make_credential("IQIYI")]
        subscribers = _subscribers(make_subscriber, "IQIYI", 50)

        result = assign_credential(subscribers[-1], "IQIYI", credentials, subscribers, now=now)

        assert result.status == AssignmentStatus.ASSIGNED
        assert result.alert is None

    def test_single_uses_earliest_credential(self, make_credential, make_subscriber, base_time, now):
        late = make_credential("WeTV", published_at=base_time + timedelta(hours=5))
        early = make_credential("WeTV", published_at=base_time)
        subscribers = _subscribers(make_subscriber, "WeTV", 12)

        for subscriber in subscribers:
            result = assign_credential(subscriber, "WeTV", [late, early], subscribers, now=now)
            assert result.credential.id == early.id

    def test_default_bucket_for_unknown_service(self, make_credential, make_subscriber, now):
        credentials = [make_credential("DramaBox"), make_credential("DramaBox")]
        subscribers = _subscribers(make_subscriber, "DramaBox", 6)

        result = assign_credential(subscribers[5], "DramaBox", credentials, subscribers, now=now)

        assert result.credential.id == "cred-1"
        assert result.status == AssignmentStatus.ASSIGNED

    def test_empty_pool(self, make_credential, make_subscriber, now):
        hidden = make_credential("Viki Pass", is_visible=False)
        subscriber = make_subscriber(["Viki Pass"])

        result = assign_credential(subscriber, "Viki Pass", [hidden], [subscriber], now=now)

        assert result.credential is None
        assert not result.has_credential
        assert result.alert == AlertMessage.NO_CREDENTIAL.value
        assert result.days_active == 0
        assert result.status == AssignmentStatus.NO_CREDENTIAL

    def test_not_in_roster_gets_first_credential(self, make_credential, make_subscriber, now):
        credentials = [make_credential("Viki Pass"), make_credential("Viki Pass")]
        roster = _subscribers(make_subscriber, "Viki Pass", 9)
        newcomer = make_subscriber(["Viki Pass"], phone_number="5599999999999")

        result = assign_credential(newcomer, "Viki Pass", credentials, roster, now=now)

        assert result.credential.id == "cred-0"
        assert result.status == AssignmentStatus.NOT_IN_ROSTER
        assert result.alert is None

    def test_override_bypasses_strategy(self, make_credential, make_subscriber, now):
        credentials = [make_credential("Viki Pass"), make_credential("Viki Pass")]
        subscribers = _subscribers(make_subscriber, "Viki Pass", 8)
        pinned = make_subscriber(["Viki Pass"], manual_credentials={"Viki": "cred-1"})
        subscribers.append(pinned)

        result = assign_credential(pinned, "Viki Pass", credentials, subscribers, now=now)

        assert result.credential.id == "cred-1"
        assert result.status == AssignmentStatus.OVERRIDDEN
        assert result.alert is None

    def test_override_can_point_at_hidden_credential(self, make_credential, make_subscriber, now):
        hidden = make_credential("Viki Pass", is_visible=False)
        pinned = make_subscriber(["Viki Pass"], manual_credentials={"Viki Pass": hidden.id})

        result = assign_credential(pinned, "Viki Pass", [hidden], [pinned], now=now)

        assert result.credential.id == hidden.id

    def test_unknown_override_is_ignored(self, make_credential, make_subscriber, now):
        credentials = [make_credential("Viki Pass")]
        subscriber = make_subscriber(["Viki Pass"], manual_credentials={"Viki Pass": "gone"})

        result = assign_credential(subscriber, "Viki Pass", credentials, [subscriber], now=now)

        assert result.credential.id == "cred-0"
        assert result.status == AssignmentStatus.ASSIGNED

    def test_determinism_under_input_order(self, make_credential, make_subscriber, now):
        credentials = [make_credential("Viki Pass") for _ in range(3)]
        subscribers = _subscribers(make_subscriber, "Viki Pass", 14)

        expected = [
            assign_credential(s, "Viki Pass", credentials, subscribers, now=now) for s in subscribers
        ]

        shuffled_creds = list(credentials)
        shuffled_subs = list(subscribers)
        random.Random(7).shuffle(shuffled_creds)
        random.Random(11).shuffle(shuffled_subs)
        actual = [
            assign_credential(s, "Viki Pass", shuffled_creds, shuffled_subs, now=now)
            for s in subscribers
        ]

        assert actual == expected


class TestReverseAssignment:
    """Test reverse assignment and roster partitioning."""

    def test_bucket_reverse_includes_overflow(self, make_credential, make_subscriber):
        credentials = [make_credential("Viki Pass"), make_credential("Viki Pass")]
        subscribers = _subscribers(make_subscriber, "Viki Pass", 10)

        first = assigned_subscribers(credentials[0], credentials, subscribers)
        second = assigned_subscribers(credentials[1], credentials, subscribers)

        assert [s.id for s in first] == ["sub-0", "sub-1", "sub-2", "sub-3", "sub-8"]
        assert [s.id for s in second] == ["sub-4", "sub-5", "sub-6", "sub-7", "sub-9"]

    def test_single_reverse(self, make_credential, make_subscriber):
        credentials = [make_credential("WeTV"), make_credential("WeTV")]
        subscribers = _subscribers(make_subscriber, "WeTV", 3)

        assert len(assigned_subscribers(credentials[0], credentials, subscribers)) == 3
        assert assigned_subscribers(credentials[1], credentials, subscribers) == []

    def test_round_robin_reverse(self, make_credential, make_subscriber):
        credentials = [make_credential("IQIYI") for _ in range(3)]
        subscribers = _subscribers(make_subscriber, "IQIYI", 7)

        third = assigned_subscribers(credentials[2], credentials, subscribers)

        assert [s.id for s in third] == ["sub-2", "sub-5"]

    def test_hidden_credential_serves_nobody(self, make_credential, make_subscriber):
        hidden = make_credential("Viki Pass", is_visible=False)
        subscribers = _subscribers(make_subscriber, "Viki Pass", 3)

        assert assigned_subscribers(hidden, [hidden], subscribers) == []

    def test_credential_outside_snapshot_serves_nobody(self, make_credential, make_subscriber):
        known = make_credential("Viki Pass")
        unknown = make_credential("Viki Pass")
        subscribers = _subscribers(make_subscriber, "Viki Pass", 3)

        assert count_assigned_subscribers(unknown, [known], subscribers) == 0
        assert count_assigned_subscribers(known, [known], subscribers) == 3

    @pytest.mark.parametrize(
        "service, pool_size, roster_size",
        [
            ("Viki Pass", 2, 11),
            ("Viki Pass", 3, 4),
            ("Kocowa", 2, 10),
            ("IQIYI", 3, 7),
            ("WeTV", 2, 5),
            ("DramaBox", 1, 13),
        ],
    )
    def test_partition_and_forward_consistency(
        self, make_credential, make_subscriber, base_time, service, pool_size, roster_size
    ):
        credentials = [make_credential(service) for _ in range(pool_size)]
        subscribers = _subscribers(make_subscriber, service, roster_size)
        subscribers.append(make_subscriber([service], deleted=True))
        subscribers.append(make_subscriber(["Something Else"]))

        partition = partition_roster(service, credentials, subscribers)
        roster_ids = [s.id for s in build_roster(service, subscribers)]

        flattened = [s.id for members in partition.values() for s in members]
        assert sorted(flattened) == sorted(roster_ids)
        assert len(flattened) == len(set(flattened))

        owner = {s.id: cred_id for cred_id, members in partition.items() for s in members}
        for subscriber in build_roster(service, subscribers):
            result = assign_credential(
                subscriber, service, credentials, subscribers, now=base_time
            )
            assert result.credential.id == owner[subscriber.id]

    def test_partition_of_empty_pool(self, make_subscriber):
        assert partition_roster("Viki Pass", [], [make_subscriber()]) == {}


class TestMergeAlerts:
    def test_merge(self):
        assert merge_alerts("a", "b") == "a | b"
        assert merge_alerts(None, "b") == "b"
        assert merge_alerts("a", None) == "a"
        assert merge_alerts(None, None) is None
