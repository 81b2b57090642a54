import os
import tempfile
import threading
import unittest

import support  # noqa: F401

from resumeflow.core.entitlement_store import PaymentOrder, SqliteEntitlementStore  # noqa: E402
from resumeflow.core.errors import StoreUnavailable  # noqa: E402
from support import temp_store  # noqa: E402


class EntitlementStoreTests(unittest.TestCase):
    def test_new_account_gets_default_balance(self):
        store = temp_store(self, default_credits=5)
        self.assertEqual(store.get_balance("user-a"), 5)
        self.assertEqual(store.get_balance("user-a"), 5)

    def test_spend_decrements_until_empty_and_never_goes_negative(self):
        store = temp_store(self, default_credits=2)
        self.assertTrue(store.try_spend("user-a"))
        self.assertTrue(store.try_spend("user-a"))
        self.assertFalse(store.try_spend("user-a"))
        self.assertEqual(store.get_balance("user-a"), 0)

    def test_spend_larger_than_balance_leaves_balance_untouched(self):
        store = temp_store(self, default_credits=3)
        self.assertFalse(store.try_spend("user-a", 4))
        self.assertEqual(store.get_balance("user-a"), 3)

    def test_spend_rejects_non_positive_amount(self):
        store = temp_store(self)
        with self.assertRaises(ValueError):
            store.try_spend("user-a", 0)

    def test_concurrent_spends_succeed_exactly_balance_times(self):
        balance, attempts = 7, 20
        store = temp_store(self, default_credits=balance)
        store.get_balance("user-a")
        barrier = threading.Barrier(attempts)
        results: list[bool] = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait(timeout=5)
            ok = store.try_spend("user-a", 1)
            with results_lock:
                results.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(attempts)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        self.assertEqual(len(results), attempts)
        self.assertEqual(sum(results), min(attempts, balance))
        self.assertEqual(store.get_balance("user-a"), max(balance - attempts, 0))

    def test_concurrent_spends_across_connections_share_one_balance(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        path = os.path.join(directory.name, "shared.db")
        first = SqliteEntitlementStore(path, default_credits=3)
        second = SqliteEntitlementStore(path, default_credits=3)
        self.addCleanup(first.close)
        self.addCleanup(second.close)
        first.get_balance("user-a")

        results: list[bool] = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(10)

        def worker(store):
            barrier.wait(timeout=5)
            ok = store.try_spend("user-a")
            with results_lock:
                results.append(ok)

        threads = [threading.Thread(target=worker, args=(first if i % 2 else second,)) for i in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        self.assertEqual(sum(results), 3)
        self.assertEqual(first.get_balance("user-a"), 0)

    def test_top_up_is_applied_once_per_reference(self):
        store = temp_store(self, default_credits=1)
        first = store.top_up("user-a", 10, reference="razorpay:order_1")
        replay = store.top_up("user-a", 10, reference="razorpay:order_1")
        self.assertTrue(first.applied)
        self.assertFalse(replay.applied)
        self.assertEqual(first.balance, 11)
        self.assertEqual(replay.balance, 11)
        self.assertEqual(store.get_balance("user-a"), 11)

    def test_refund_adds_credit_back(self):
        store = temp_store(self, default_credits=1)
        self.assertTrue(store.try_spend("user-a"))
        self.assertEqual(store.refund("user-a"), 1)

    def test_orders_round_trip_and_mark_paid(self):
        store = temp_store(self)
        store.record_order(
            PaymentOrder(
                order_id="order_1",
                user_id="user-a",
                plan_id="starter",
                credits=10,
                amount=49900,
                currency="INR",
                status="created",
                payment_id=None,
            )
        )
        store.mark_order_paid("order_1", "pay_1")
        order = store.get_order("order_1")
        self.assertIsNotNone(order)
        self.assertEqual(order.status, "paid")
        self.assertEqual(order.payment_id, "pay_1")
        self.assertIsNone(store.get_order("missing"))

    def test_unreachable_database_raises_store_unavailable(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        store = SqliteEntitlementStore(directory.name)
        with self.assertRaises(StoreUnavailable):
            store.get_balance("user-a")
        with self.assertRaises(StoreUnavailable):
            store.try_spend("user-a")


if __name__ == "__main__":
    unittest.main()
