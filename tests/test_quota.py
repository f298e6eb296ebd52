"""Unit tests for daily quotas."""

import datetime
import threading
import unittest

from daily_feed import quota
from daily_feed.quota import QuotaGuard, limit_for, load_limits

from fakes import InMemoryStore


class Clock:
    def __init__(self, day):
        self.day = day

    def __call__(self):
        return self.day


class TestQuotaGuard(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.clock = Clock(datetime.date(2026, 3, 1))
        self.guard = QuotaGuard(self.store, today=self.clock)

    def test_free_link_import_limit(self):
        user, resource = "u1", quota.RESOURCE_LINK_IMPORT
        for expected in (1, 2, 3):
            self.assertTrue(self.guard.check_quota(user, resource, 3))
            self.assertEqual(self.guard.increment_quota(user, resource), expected)

        self.assertFalse(self.guard.check_quota(user, resource, 3))
        self.assertEqual(self.guard.get_usage(user, resource), 3)

    def test_counter_resets_on_new_day(self):
        user, resource = "u1", quota.RESOURCE_TEXT_IMPORT
        for _ in range(3):
            self.guard.increment_quota(user, resource)
        self.assertFalse(self.guard.check_quota(user, resource, 3))

        self.clock.day = datetime.date(2026, 3, 2)

        self.assertEqual(self.guard.get_usage(user, resource), 0)
        self.assertTrue(self.guard.check_quota(user, resource, 3))
        record = self.store.quotas[(user, resource)]
        self.assertEqual(record["count"], 0)
        self.assertEqual(record["last_reset_at"], "2026-03-02")

    def test_first_check_creates_record(self):
        self.assertTrue(self.guard.check_quota("u1", quota.RESOURCE_LINK_IMPORT, 3))

        record = self.store.quotas[("u1", quota.RESOURCE_LINK_IMPORT)]
        self.assertEqual(record["count"], 0)
        self.assertEqual(record["last_reset_at"], "2026-03-01")

    def test_get_usage_does_not_write(self):
        self.assertEqual(self.guard.get_usage("u1", quota.RESOURCE_LINK_IMPORT), 0)
        self.assertEqual(self.store.quotas, {})

    def test_counters_are_per_user_and_resource(self):
        self.guard.increment_quota("u1", quota.RESOURCE_LINK_IMPORT)

        self.assertEqual(self.guard.get_usage("u2", quota.RESOURCE_LINK_IMPORT), 0)
        self.assertEqual(self.guard.get_usage("u1", quota.RESOURCE_TEXT_IMPORT), 0)

    def test_try_consume_stops_at_limit(self):
        results = [self.guard.try_consume("u1", quota.RESOURCE_LINK_IMPORT, 3) for _ in range(5)]

        self.assertEqual(results, [True, True, True, False, False])
        self.assertEqual(self.guard.get_usage("u1", quota.RESOURCE_LINK_IMPORT), 3)

    def test_try_consume_is_atomic_across_threads(self):
        allowed = []
        lock = threading.Lock()

        def worker():
            ok = self.guard.try_consume("u1", quota.RESOURCE_LINK_IMPORT, 3)
            with lock:
                allowed.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(allowed.count(True), 3)
        self.assertEqual(self.guard.get_usage("u1", quota.RESOURCE_LINK_IMPORT), 3)


class TestLimits(unittest.TestCase):
    def test_defaults(self):
        limits = load_limits({})

        self.assertEqual(limit_for(quota.PLAN_FREE, quota.RESOURCE_LINK_IMPORT, limits), 3)
        self.assertEqual(limit_for(quota.PLAN_FREE, quota.RESOURCE_TEXT_IMPORT, limits), 10)
        self.assertEqual(limit_for(quota.PLAN_PRO, quota.RESOURCE_LINK_IMPORT, limits), 20)
        self.assertEqual(limit_for(quota.PLAN_PRO, quota.RESOURCE_TEXT_IMPORT, limits), 100000)

    def test_uncapped_resources(self):
        limits = load_limits({})

        self.assertIsNone(limit_for(quota.PLAN_FREE, quota.RESOURCE_IMAGE_IMPORT, limits))
        self.assertIsNone(limit_for(quota.PLAN_PRO, quota.RESOURCE_YOUTUBE_IMPORT, limits))

    def test_unknown_plan_gets_free_limits(self):
        self.assertEqual(limit_for("ENTERPRISE", quota.RESOURCE_LINK_IMPORT, load_limits({})), 3)

    def test_environment_overrides(self):
        limits = load_limits({"LIMIT_FREE_LINK": "5", "LIMIT_PRO_TEXT": "not-a-number"})

        self.assertEqual(limits[quota.PLAN_FREE][quota.RESOURCE_LINK_IMPORT], 5)
        self.assertEqual(limits[quota.PLAN_PRO][quota.RESOURCE_TEXT_IMPORT], 100000)

    def test_display_names(self):
        self.assertEqual(quota.resource_display_name(quota.RESOURCE_LINK_IMPORT), "link imports")
        self.assertEqual(quota.resource_display_name("custom"), "custom")


if __name__ == "__main__":
    unittest.main()
