import unittest
import json
import os
import tempfile
from hunt_tracker.core.reading import Reading
from hunt_tracker.services.replay_source import ReplayReadingSource

class TestReplayReadingSource(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "hunt.jsonl")

    def tearDown(self):
        self.tmp.cleanup()

    def write_lines(self, lines):
        with open(self.path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line if isinstance(line, str) else json.dumps(line))
                f.write("\n")

    def test_values_and_text_lines(self):
        self.write_lines([
            {"t": 1000, "exp": 55289816, "percent": 19.79, "currency": 78972001},
            {"t": 2000, "exp_text": "EXP 55290100 [19.80%]", "currency_text": "78,972,501"},
        ])
        source = ReplayReadingSource(self.path)
        self.assertTrue(source.initialize())
        self.assertEqual(len(source), 2)
        self.assertEqual(source.clock(), 1000)

        self.assertEqual(source.read(), Reading(55289816, 19.79, 78972001))
        self.assertEqual(source.read(), Reading(55290100, 19.80, 78972501))
        self.assertEqual(source.clock(), 2000)
        self.assertTrue(source.exhausted)
        self.assertIsNone(source.read())

    def test_malformed_lines_are_skipped(self):
        self.write_lines([
            "{broken",
            "[1, 2]",
            {"exp": 10},
            "",
            '{"t": 2, "exp": Infinity}',
            '{"t": 3, "exp": 1e400}',
            '{"t": 4, "percent": NaN}',
            '{"t": 1e400, "exp": 5}',
            '{"t": NaN, "exp": 5}',
            {"t": 6, "currency": "lots"},
            {"t": 5000, "exp": 10, "percent": 1.0},
        ])
        source = ReplayReadingSource(self.path)
        self.assertTrue(source.initialize())
        self.assertEqual(len(source), 1)
        self.assertEqual(source.read(), Reading(10, 1.0, None))

    def test_missing_file(self):
        source = ReplayReadingSource(os.path.join(self.tmp.name, "missing.jsonl"))
        self.assertFalse(source.initialize())
        self.assertTrue(source.exhausted)

if __name__ == '__main__':
    unittest.main()
