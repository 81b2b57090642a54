import unittest
from unittest.mock import MagicMock

import support  # noqa: F401

from resumeflow.core.errors import (  # noqa: E402
    CompletionFailed,
    InsufficientCredits,
    StoreUnavailable,
    Unauthenticated,
)
from resumeflow.services.credit_gate import CreditGate  # noqa: E402
from support import temp_store  # noqa: E402


class CreditGateTests(unittest.TestCase):
    def test_spends_once_before_running_operation(self):
        events: list[str] = []
        store = MagicMock()
        store.try_spend.side_effect = lambda user_id, amount: events.append(f"spend:{user_id}:{amount}") or True

        def operation():
            events.append("run")
            return "ok"

        result = CreditGate(store, refund_on_failure=False).run_gated("user-a", operation)

        self.assertEqual(result, "ok")
        self.assertEqual(events, ["spend:user-a:1", "run"])
        store.try_spend.assert_called_once_with("user-a", 1)

    def test_operation_never_runs_when_spend_fails(self):
        store = MagicMock()
        store.try_spend.return_value = False
        operation = MagicMock()

        with self.assertRaises(InsufficientCredits):
            CreditGate(store).run_gated("user-a", operation)

        operation.assert_not_called()
        store.try_spend.assert_called_once_with("user-a", 1)

    def test_missing_user_is_rejected_without_touching_store(self):
        store = MagicMock()
        operation = MagicMock()
        for user_id in (None, ""):
            with self.assertRaises(Unauthenticated):
                CreditGate(store).run_gated(user_id, operation)
        store.try_spend.assert_not_called()
        operation.assert_not_called()

    def test_store_failure_is_not_reported_as_insufficient_credits(self):
        store = MagicMock()
        store.try_spend.side_effect = StoreUnavailable()
        operation = MagicMock()
        with self.assertRaises(StoreUnavailable):
            CreditGate(store).run_gated("user-a", operation)
        operation.assert_not_called()

    def test_failed_operation_keeps_the_credit_spent(self):
        store = temp_store(self, default_credits=2)

        def operation():
            raise CompletionFailed("provider down")

        with self.assertRaises(CompletionFailed) as ctx:
            CreditGate(store, refund_on_failure=False).run_gated("user-a", operation)

        self.assertEqual(str(ctx.exception), "provider down")
        self.assertEqual(store.get_balance("user-a"), 1)

    def test_refund_policy_restores_credit_when_enabled(self):
        store = temp_store(self, default_credits=2)

        def operation():
            raise CompletionFailed("provider down")

        with self.assertRaises(CompletionFailed):
            CreditGate(store, refund_on_failure=True).run_gated("user-a", operation)

        self.assertEqual(store.get_balance("user-a"), 2)

    def test_successful_operation_spends_exactly_one_credit(self):
        store = temp_store(self, default_credits=3)
        CreditGate(store).run_gated("user-a", lambda: [1, 2, 3])
        self.assertEqual(store.get_balance("user-a"), 2)


if __name__ == "__main__":
    unittest.main()
