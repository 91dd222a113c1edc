import threading
import unittest

from phishlens.schemas import FeedbackCreate, ScanCreate, UserCreate
from phishlens.storage import FeedbackExistsError, MemStorage, UsernameTakenError


def make_scan(verdict="safe", type="url", target="example.com", details=None):
    return ScanCreate(
        type=type,
        target=target,
        verdict=verdict,
        confidence=90,
        details=["Valid domain structure"] if details is None else details,
    )


class TestScans(unittest.TestCase):
    def setUp(self):
        self.storage = MemStorage()

    def test_ids_are_sequential(self):
        first = self.storage.create_scan(make_scan())
        second = self.storage.create_scan(make_scan())

        self.assertEqual((first.id, second.id), (1, 2))
        self.assertEqual(self.storage.get_scan(2), second)
        self.assertIsNone(self.storage.get_scan(3))

    def test_empty_details_stored_as_none(self):
        scan = self.storage.create_scan(make_scan(details=[]))

        self.assertIsNone(scan.details)

    def test_history_is_newest_first_with_paging(self):
        for i in range(5):
            self.storage.create_scan(make_scan(target=f"site{i}.com"))

        ids = [s.id for s in self.storage.get_scans()]
        self.assertEqual(ids, [5, 4, 3, 2, 1])

        page = self.storage.get_scans(limit=2, offset=1)
        self.assertEqual([s.id for s in page], [4, 3])

    def test_scans_by_type(self):
        self.storage.create_scan(make_scan(type="url"))
        self.storage.create_scan(make_scan(type="screenshot", target="a.png"))
        self.storage.create_scan(make_scan(type="screenshot", target="b.png"))

        shots = self.storage.get_scans_by_type("screenshot")
        self.assertEqual([s.target for s in shots], ["b.png", "a.png"])
        self.assertEqual(len(self.storage.get_scans_by_type("screenshot", limit=1)), 1)

    def test_stats_partition_total(self):
        for verdict in ["safe", "safe", "phishing", "suspicious"]:
            self.storage.create_scan(make_scan(verdict=verdict))

        stats = self.storage.get_stats()
        self.assertEqual(stats.total_scans, 4)
        self.assertEqual(stats.safe_count, 2)
        self.assertEqual(stats.phishing_count, 1)
        self.assertEqual(stats.suspicious_count, 1)

    def test_empty_stats(self):
        stats = self.storage.get_stats()

        self.assertEqual(stats.total_scans, 0)
        self.assertEqual(stats.safe_count + stats.phishing_count + stats.suspicious_count, 0)


class TestFeedback(unittest.TestCase):
    def setUp(self):
        self.storage = MemStorage()
        self.scan = self.storage.create_scan(make_scan())

    def test_create_and_lookup(self):
        feedback = self.storage.create_feedback(
            FeedbackCreate(scan_id=self.scan.id, is_correct=True, comment="")
        )

        self.assertEqual(feedback.id, 1)
        self.assertIsNone(feedback.comment)
        self.assertEqual(self.storage.get_feedback_by_scan_id(self.scan.id), feedback)
        self.assertIsNone(self.storage.get_feedback_by_scan_id(99))

    def test_second_feedback_rejected(self):
        first = self.storage.create_feedback(
            FeedbackCreate(scan_id=self.scan.id, is_correct=True, comment="right")
        )

        with self.assertRaises(FeedbackExistsError):
            self.storage.create_feedback(
                FeedbackCreate(scan_id=self.scan.id, is_correct=False, comment="wrong")
            )

        self.assertEqual(self.storage.get_feedback_by_scan_id(self.scan.id), first)

    def test_concurrent_submissions_only_one_wins(self):
        results = []
        barrier = threading.Barrier(8)

        def submit():
            barrier.wait()
            try:
                self.storage.create_feedback(
                    FeedbackCreate(scan_id=self.scan.id, is_correct=True)
                )
                results.append("ok")
            except FeedbackExistsError:
                results.append("duplicate")

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(results.count("ok"), 1)
        self.assertEqual(results.count("duplicate"), 7)


class TestUsers(unittest.TestCase):
    def setUp(self):
        self.storage = MemStorage()

    def test_create_and_lookup(self):
        user = self.storage.create_user(UserCreate(username="alice", password="pw"))

        self.assertEqual(user.id, 1)
        self.assertEqual(self.storage.get_user(1), user)
        self.assertEqual(self.storage.get_user_by_username("alice"), user)
        self.assertIsNone(self.storage.get_user_by_username("bob"))

    def test_duplicate_username(self):
        self.storage.create_user(UserCreate(username="alice", password="pw"))

        with self.assertRaises(UsernameTakenError):
            self.storage.create_user(UserCreate(username="alice", password="other"))

        second = self.storage.create_user(UserCreate(username="bob", password="pw"))
        self.assertEqual(second.id, 2)


if __name__ == "__main__":
    unittest.main()
