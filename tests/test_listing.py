from datetime import datetime, timedelta, timezone

from apikey_manager.core import calculate_usage_stats
from apikey_manager.models import UsageRecord

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestKeyListing:

    def test_empty_store(self, lister, clock):
        listing = lister.list_keys(clock.now)
        assert listing.keys == []
        assert listing.total == 0

    def test_new_key_has_no_usage(self, generator, lister, clock):
        key_id, _ = generator.generate("Acme")

        listing = lister.list_keys(clock.now)
        assert listing.total == 1

        entry = listing.keys[0]
        assert entry.key_id == key_id
        assert entry.organization == "Acme"
        assert entry.is_expired is False
        assert entry.expires_at is None
        assert entry.usage_stats.total_requests == 0
        assert entry.usage_stats.last_used is None
        assert entry.usage_stats.unique_ip_count == 0
        assert entry.usage_stats.most_recent_ip is None

    def test_newest_key_listed_first(self, generator, lister, clock):
        issued = [generator.generate(f"org-{i}")[0] for i in range(4)]

        listing = lister.list_keys(clock.now)
        assert [entry.key_id for entry in listing.keys] == list(reversed(issued))

    def test_usage_counts_match_validations(self, generator, validator, lister, clock, sample_ips):
        key_id, credential = generator.generate("Acme")
        other_id, _ = generator.generate("Globex")

        for i in range(7):
            clock.advance()
            validator.validate(credential, sample_ips[i % 2])

        stats = {e.key_id: e.usage_stats for e in lister.list_keys(clock.now).keys}
        assert stats[key_id].total_requests == 7
        assert stats[key_id].unique_ip_count == 2
        assert stats[key_id].last_used == clock.now
        assert stats[key_id].most_recent_ip == sample_ips[0]
        assert stats[other_id].total_requests == 0

    def test_revoked_key_marked_expired(self, generator, revoker, lister, clock):
        key_id, _ = generator.generate("Acme")
        revoker.revoke(key_id)

        entry = lister.list_keys(clock.now).keys[0]
        assert entry.is_expired is True
        assert entry.expires_at == clock.now

    def test_future_expiration_not_expired(self, generator, store, lister, clock):
        key_id, _ = generator.generate("Acme")
        store.revoke(key_id, clock.now + timedelta(minutes=5))

        assert lister.list_keys(clock.now).keys[0].is_expired is False

    def test_deleted_key_omitted(self, generator, revoker, lister, clock):
        kept, _ = generator.generate("Acme")
        gone, _ = generator.generate("Globex")
        revoker.delete(gone)

        listing = lister.list_keys(clock.now)
        assert [e.key_id for e in listing.keys] == [kept]
        assert listing.total == 1


class TestUsageStats:

    def test_no_usage(self):
        stats = calculate_usage_stats([])
        assert stats.total_requests == 0
        assert stats.unique_ip_count == 0
        assert stats.last_used is None

    def test_most_recent_by_observed_time(self):
        usages = [
            UsageRecord("k", "1.1.1.1", T0 + timedelta(seconds=5), sequence=1),
            UsageRecord("k", "2.2.2.2", T0 + timedelta(seconds=9), sequence=2),
            UsageRecord("k", "1.1.1.1", T0 + timedelta(seconds=3), sequence=3),
        ]

        stats = calculate_usage_stats(usages)
        assert stats.total_requests == 3
        assert stats.unique_ip_count == 2
        assert stats.last_used == T0 + timedelta(seconds=9)
        assert stats.most_recent_ip == "2.2.2.2"

    def test_equal_timestamps_prefer_later_sequence(self):
        usages = [
            UsageRecord("k", "1.1.1.1", T0, sequence=1),
            UsageRecord("k", "2.2.2.2", T0, sequence=2),
        ]

        assert calculate_usage_stats(usages).most_recent_ip == "2.2.2.2"


class TestAcmeScenario:

    def test_generate_validate_list_revoke(self, generator, validator, lister, revoker, clock):
        key_id, credential = generator.generate("Acme")

        clock.advance()
        assert validator.validate(credential, "1.2.3.4").key_id == key_id
        clock.advance()
        assert validator.validate(credential, "5.6.7.8").key_id == key_id

        entry = lister.list_keys(clock.now).keys[0]
        assert entry.key_id == key_id
        assert entry.usage_stats.total_requests == 2
        assert entry.usage_stats.unique_ip_count == 2
        assert entry.usage_stats.most_recent_ip == "5.6.7.8"

        assert revoker.revoke(key_id).key_id == key_id
        assert lister.list_keys(clock.now).keys[0].is_expired is True
