"""Terminal host checks, raw-mode lifecycle, and key decoding."""

from __future__ import annotations

import io
import os
import unittest
from unittest import mock

from irexplorer.input import reader
from irexplorer.input.reader import read_key
from irexplorer.runtime.terminal import TerminalController, UnsupportedHostError, ensure_interactive_host


class _Stream(io.StringIO):
    def __init__(self, tty: bool) -> None:
        super().__init__()
        self._tty = tty

    def isatty(self) -> bool:
        return self._tty


class HostCheckTests(unittest.TestCase):
    def test_accepts_two_terminals(self) -> None:
        ensure_interactive_host(_Stream(True), _Stream(True))

    def test_rejects_piped_stdin_or_stdout(self) -> None:
        for stdin_tty, stdout_tty, name in ((False, True, "stdin"), (True, False, "stdout")):
            with self.subTest(name=name):
                with self.assertRaises(UnsupportedHostError) as caught:
                    ensure_interactive_host(_Stream(stdin_tty), _Stream(stdout_tty))
                self.assertIn(name, str(caught.exception))

    def test_closed_stream_is_not_interactive(self) -> None:
        closed = _Stream(True)
        closed.isatty = mock.Mock(side_effect=ValueError("I/O operation on closed file"))

        with self.assertRaises(UnsupportedHostError):
            ensure_interactive_host(closed, _Stream(True))


class TerminalControllerTests(unittest.TestCase):
    def _controller(self):
        patches = [
            mock.patch("irexplorer.runtime.terminal.termios.tcgetattr", return_value=["saved"]),
            mock.patch("irexplorer.runtime.terminal.termios.tcsetattr"),
            mock.patch("irexplorer.runtime.terminal.tty.setraw"),
            mock.patch("irexplorer.runtime.terminal.os.write"),
        ]
        mocks = [patcher.start() for patcher in patches]
        for patcher in patches:
            self.addCleanup(patcher.stop)
        return TerminalController(3, 4), mocks

    def test_raw_mode_enters_and_restores(self) -> None:
        controller, (_tcgetattr, tcsetattr, setraw, write) = self._controller()

        with controller.raw_mode():
            setraw.assert_called_once_with(3, mock.ANY)
            tcsetattr.assert_not_called()

        tcsetattr.assert_called_once_with(3, mock.ANY, ["saved"])
        writes = [call.args for call in write.call_args_list]
        self.assertEqual(writes[0], (4, b"\x1b[?1049h\x1b[?25l"))
        self.assertEqual(writes[-1], (4, b"\x1b[?25h\x1b[?1049l"))

    def test_raw_mode_restores_on_exception(self) -> None:
        controller, (_tcgetattr, tcsetattr, _setraw, _write) = self._controller()

        with self.assertRaises(RuntimeError):
            with controller.raw_mode():
                raise RuntimeError("boom")

        tcsetattr.assert_called_once_with(3, mock.ANY, ["saved"])


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        read_fd, write_fd = os.pipe()
        self.read_fd = read_fd
        self.write_fd = write_fd
        self.addCleanup(os.close, read_fd)
        self.addCleanup(os.close, write_fd)
        reader._PENDING_BYTES.clear()
        self.addCleanup(reader._PENDING_BYTES.clear)

    def _feed(self, data: bytes) -> None:
        os.write(self.write_fd, data)

    def test_timeout_returns_empty_string(self) -> None:
        self.assertEqual(read_key(self.read_fd, timeout_ms=0), "")

    def test_named_single_bytes(self) -> None:
        self._feed(b"\r\x7f\x03 q")

        keys = [read_key(self.read_fd, timeout_ms=10) for _ in range(5)]

        self.assertEqual(keys, ["ENTER", "BACKSPACE", "CTRL_C", " ", "q"])

    def test_arrow_sequences(self) -> None:
        self._feed(b"\x1b[A\x1b[B\x1bOC\x1b[D\x1b[5~")

        keys = [read_key(self.read_fd, timeout_ms=10) for _ in range(5)]

        self.assertEqual(keys, ["UP", "DOWN", "RIGHT", "LEFT", "PAGE_UP"])

    def test_lone_escape(self) -> None:
        self._feed(b"\x1b")

        self.assertEqual(read_key(self.read_fd, timeout_ms=10), "ESC")

    def test_escape_followed_by_text_keeps_the_text(self) -> None:
        self._feed(b"\x1bq")

        self.assertEqual(read_key(self.read_fd, timeout_ms=10), "ESC")
        self.assertEqual(read_key(self.read_fd, timeout_ms=10), "q")

    def test_multibyte_utf8_character(self) -> None:
        self._feed("é".encode("utf-8"))

        self.assertEqual(read_key(self.read_fd, timeout_ms=10), "é")


if __name__ == "__main__":
    unittest.main()
