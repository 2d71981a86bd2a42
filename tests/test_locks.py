import threading
import unittest

from application.locks import PlayerLocks


class PlayerLocksTests(unittest.TestCase):
    def test_lock_is_dropped_after_release(self):
        locks = PlayerLocks()

        with locks.hold("p1"):
            self.assertEqual(len(locks), 1)

        self.assertEqual(len(locks), 0)

    def test_lock_is_dropped_when_body_raises(self):
        locks = PlayerLocks()

        with self.assertRaises(RuntimeError):
            with locks.hold("p1"):
                raise RuntimeError("boom")

        self.assertEqual(len(locks), 0)

    def test_waiter_keeps_lock_alive_and_runs_after_holder(self):
        locks = PlayerLocks()
        order = []
        holding = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("p1"):
                holding.set()
                release.wait(5)
                order.append("holder")

        def waiter():
            with locks.hold("p1"):
                order.append("waiter")

        first = threading.Thread(target=holder)
        first.start()
        holding.wait(5)
        second = threading.Thread(target=waiter)
        second.start()
        second.join(0.1)
        self.assertEqual(order, [])

        release.set()
        first.join(5)
        second.join(5)

        self.assertEqual(order, ["holder", "waiter"])
        self.assertEqual(len(locks), 0)

    def test_many_players_leave_no_locks_behind(self):
        locks = PlayerLocks()
        for i in range(100):
            with locks.hold(f"p{i}"):
                pass

        self.assertEqual(len(locks), 0)


if __name__ == "__main__":
    unittest.main()
