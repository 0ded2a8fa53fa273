import shutil
import tempfile
import unittest
from pathlib import Path
from queue import Queue

from dusort.tui.model import Record
from dusort.tui.reader import END_OF_STREAM, MalformedLineError, RecordReader, split_line
from dusort.utils.runlog import RunLogger


def drain(q):
    items = []
    while True:
        item = q.get_nowait()
        if item is END_OF_STREAM:
            return items
        items.append(item)


class FailingLines:
    """Yields some lines, then fails like a broken pipe would."""

    def __init__(self, lines, exc):
        self.lines = lines
        self.exc = exc

    def __iter__(self):
        for line in self.lines:
            yield line
        raise self.exc


class TestSplitLine(unittest.TestCase):

    def test_splits_on_first_delimiter(self):
        self.assertEqual(("4.0K", "a\tb"), split_line("4.0K\ta\tb"))

    def test_custom_delimiter(self):
        self.assertEqual(("1M", "dir"), split_line("1M dir", " "))

    def test_missing_delimiter(self):
        with self.assertRaises(MalformedLineError):
            split_line("4.0K fileA")


class TestRecordReader(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.log_path = Path(self.tmp) / "dusort.log"
        self.logger = RunLogger(self.log_path, run_id="test")
        self.queue = Queue()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def log_text(self):
        return self.log_path.read_text(encoding="utf-8")

    def test_parses_records_in_arrival_order(self):
        lines = ["4.0K\tfileA\n", "1.0M\tfileB\n", "512\tfileC\n"]
        RecordReader(lines, self.queue, self.logger).run()
        self.assertEqual(
            [
                Record("fileA", "4.0K", 4096.0),
                Record("fileB", "1.0M", 1048576.0),
                Record("fileC", "512", 512.0),
            ],
            drain(self.queue),
        )

    def test_parse_failure_keeps_record_at_zero(self):
        reader = RecordReader(["abcK\tbroken\n"], self.queue, self.logger)
        reader.run()
        self.assertEqual([Record("broken", "abcK", 0.0)], drain(self.queue))
        self.assertEqual(1, reader.stats.parse_errors)
        self.assertIn("WARN parse error 'abcK'", self.log_text())

    def test_missing_delimiter_is_skipped_with_warning(self):
        reader = RecordReader(["4.0K fileA\n", "1K\tok\n"], self.queue, self.logger)
        reader.run()
        self.assertEqual(["ok"], [r.label for r in drain(self.queue)])
        self.assertEqual(1, reader.stats.skipped)
        self.assertIn("WARN skipping line 1", self.log_text())

    def test_blank_lines_are_ignored(self):
        reader = RecordReader(["\n", "   \n", "1K\tx\n"], self.queue, self.logger)
        reader.run()
        self.assertEqual(["x"], [r.label for r in drain(self.queue)])
        self.assertEqual(0, reader.stats.skipped)

    def test_crlf_is_stripped(self):
        RecordReader(["1K\twin\r\n"], self.queue, self.logger).run()
        self.assertEqual("win", drain(self.queue)[0].label)

    def test_leading_space_size_is_preserved_for_display(self):
        RecordReader([" 4.0K\tpadded\n"], self.queue, self.logger).run()
        record = drain(self.queue)[0]
        self.assertEqual(" 4.0K", record.display_size)
        self.assertEqual(4096.0, record.magnitude)

    def test_read_error_ends_stream(self):
        lines = FailingLines(["1K\ta\n"], OSError("broken pipe"))
        RecordReader(lines, self.queue, self.logger).run()
        self.assertEqual(["a"], [r.label for r in drain(self.queue)])
        self.assertIn("ERROR error reading input: broken pipe", self.log_text())

    def test_end_of_stream_on_empty_input(self):
        RecordReader([], self.queue, self.logger).run()
        self.assertIs(END_OF_STREAM, self.queue.get_nowait())
        self.assertIn("input finished lines=0 records=0", self.log_text())


if __name__ == '__main__':
    unittest.main()
