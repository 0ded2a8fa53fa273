import argparse
import io
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from dusort import cli
from dusort.utils.runlog import RunLogger
from dusort.utils.terminal import stdin_is_piped


def pipe_with(text):
    """Return a readable text stream backed by a real OS pipe."""
    read_fd, write_fd = os.pipe()
    with os.fdopen(write_fd, "w", encoding="utf-8") as w:
        w.write(text)
    return os.fdopen(read_fd, "r", encoding="utf-8")


class TestLoadDotenv(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_sets_missing_keys_only(self):
        env_file = Path(self.tmp) / ".env"
        env_file.write_text(
            "# comment\n\nDUSORT_LOG_ROOT=/tmp/dusort-logs\nnot a setting\nDUSORT_DELIMITER=;\n",
            encoding="utf-8",
        )
        with mock.patch.dict(os.environ, {"DUSORT_DELIMITER": ","}, clear=True):
            cli.load_dotenv(env_file)
            self.assertEqual("/tmp/dusort-logs", os.environ["DUSORT_LOG_ROOT"])
            self.assertEqual(",", os.environ["DUSORT_DELIMITER"])
            self.assertNotIn("not a setting", os.environ)

    def test_missing_file_is_ignored(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            cli.load_dotenv(Path(self.tmp) / "absent.env")
            self.assertEqual({}, dict(os.environ))


class TestArguments(unittest.TestCase):

    def test_delimiter_escape(self):
        self.assertEqual("\t", cli.delimiter_arg("\\t"))
        self.assertEqual(";", cli.delimiter_arg(";"))

    def test_empty_delimiter_rejected(self):
        with self.assertRaises(argparse.ArgumentTypeError):
            cli.delimiter_arg("")

    def test_delimiter_default_from_environment(self):
        with mock.patch.dict(os.environ, {"DUSORT_DELIMITER": ";"}):
            args = cli.build_parser().parse_args([])
        self.assertEqual(";", args.delimiter)
        self.assertFalse(args.no_tui)


class TestGating(unittest.TestCase):

    def test_pipe_counts_as_piped(self):
        stream = pipe_with("")
        try:
            self.assertTrue(stdin_is_piped(stream))
        finally:
            stream.close()

    def test_character_device_is_not_piped(self):
        with open(os.devnull) as stream:
            self.assertFalse(stdin_is_piped(stream))

    def test_main_refuses_interactive_stdin(self):
        stderr = io.StringIO()
        with mock.patch.object(cli, "load_dotenv"), \
                mock.patch.object(cli, "stdin_is_piped", return_value=False), \
                mock.patch("sys.stderr", stderr):
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])
        self.assertEqual(1, ctx.exception.code)
        self.assertIn(cli.NOT_PIPED_MESSAGE, stderr.getvalue())


class TestPlainMode(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.log_path = Path(self.tmp) / "dusort.log"

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_run_plain_ranks_by_size(self):
        out = io.StringIO()
        lines = ["4.0K\tfileA\n", "1.0M\tfileB\n", "512\tfileC\n"]
        ranked = cli.run_plain(lines, out, RunLogger(self.log_path))
        self.assertEqual(["fileB", "fileA", "fileC"], [r.label for r in ranked])
        self.assertEqual("1.0M\tfileB\n4.0K\tfileA\n512\tfileC\n", out.getvalue())

    def test_run_plain_tolerates_bad_lines(self):
        out = io.StringIO()
        lines = ["1K\tx\n", "no delimiter\n", "abcK\tbad\n", "1024\ty\n", "2K\tz\n"]
        ranked = cli.run_plain(lines, out, RunLogger(self.log_path))
        labels = [r.label for r in ranked]
        self.assertEqual("z", labels[0])
        self.assertEqual({"x", "y"}, set(labels[1:3]))
        self.assertEqual("bad", labels[3])
        self.assertEqual(4, len(labels))

    def test_main_no_tui(self):
        stdin = pipe_with("4.0K\tfileA\n1.0M\tfileB\n512\tfileC\n")
        stdout = io.StringIO()
        try:
            with mock.patch.object(cli, "load_dotenv"), \
                    mock.patch("sys.stdin", stdin), \
                    mock.patch("sys.stdout", stdout):
                with self.assertRaises(SystemExit) as ctx:
                    cli.main(["--no-tui", "--log-file", str(self.log_path)])
        finally:
            stdin.close()
        self.assertEqual(0, ctx.exception.code)
        self.assertEqual("1.0M\tfileB\n4.0K\tfileA\n512\tfileC\n", stdout.getvalue())
        self.assertIn("[stage=stream] INFO stream finished records=3",
                      self.log_path.read_text(encoding="utf-8"))


if __name__ == '__main__':
    unittest.main()
