import unittest

from ivo.nanocontracts.exception import FutureQuery, InvariantViolation
from ivo.nanocontracts.snapshot_ledger import Snapshot, SnapshotLedger

ALICE = b'alice'
BOB = b'bob'


class SnapshotLedgerTestCase(unittest.TestCase):

    def setUp(self):
        super().setUp()
        self.ledger = SnapshotLedger()

    def test_empty_subject_reads_zero(self):
        self.assertEqual(self.ledger.value_at(ALICE, 10, 10), 0)
        self.assertEqual(self.ledger.latest(ALICE), 0)
        self.assertEqual(self.ledger.history(ALICE), [])
        self.assertEqual(len(self.ledger), 0)

    def test_value_at_returns_latest_record_at_or_before_counter(self):
        self.ledger.write_snapshot(ALICE, 5, 100)
        self.ledger.write_snapshot(ALICE, 8, 70)
        self.ledger.write_snapshot(ALICE, 12, 0)

        self.assertEqual(self.ledger.value_at(ALICE, 4, 20), 0)
        self.assertEqual(self.ledger.value_at(ALICE, 5, 20), 100)
        self.assertEqual(self.ledger.value_at(ALICE, 7, 20), 100)
        self.assertEqual(self.ledger.value_at(ALICE, 8, 20), 70)
        self.assertEqual(self.ledger.value_at(ALICE, 11, 20), 70)
        self.assertEqual(self.ledger.value_at(ALICE, 20, 20), 0)

    def test_same_counter_overwrites(self):
        self.ledger.write_snapshot(ALICE, 3, 10)
        self.ledger.write_snapshot(ALICE, 3, 25)
        self.assertEqual(self.ledger.history(ALICE), [Snapshot(3, 25)])
        self.assertEqual(self.ledger.latest(ALICE), 25)

    def test_lower_counter_is_rejected(self):
        self.ledger.write_snapshot(ALICE, 3, 10)
        with self.assertRaises(InvariantViolation):
            self.ledger.write_snapshot(ALICE, 2, 10)
        self.assertEqual(self.ledger.history(ALICE), [Snapshot(3, 10)])

    def test_negative_value_is_rejected(self):
        with self.assertRaises(InvariantViolation):
            self.ledger.write_snapshot(ALICE, 1, -1)

    def test_future_query_fails(self):
        self.ledger.write_snapshot(ALICE, 3, 10)
        with self.assertRaises(FutureQuery):
            self.ledger.value_at(ALICE, 4, 3)

    def test_subjects_are_independent(self):
        self.ledger.write_snapshot(ALICE, 1, 10)
        self.ledger.write_snapshot(BOB, 2, 20)
        self.ledger.write_snapshot(ALICE, 3, 30)

        self.assertEqual(self.ledger.value_at(BOB, 1, 3), 0)
        self.assertEqual(self.ledger.value_at(BOB, 3, 3), 20)
        self.assertEqual(self.ledger.value_at(ALICE, 2, 3), 10)
        self.assertEqual(set(self.ledger.subjects()), {ALICE, BOB})
        self.assertEqual(len(self.ledger), 2)
