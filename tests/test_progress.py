"""Tests for progress reporting."""

from __future__ import annotations

import threading
import unittest

from fightrecords.records.progress import (
    ProgressChannel,
    ProgressChannelClosed,
    ProgressReporter,
)


class ProgressReporterTestCase(unittest.TestCase):
    def test_messages_are_kept_and_forwarded_in_order(self) -> None:
        received: list[str] = []
        reporter = ProgressReporter(received.append)

        with self.assertLogs("fightrecords.records.progress", level="INFO"):
            reporter("Processing event: A")
            reporter("Processed batch of 1 events")

        self.assertEqual(received, ["Processing event: A", "Processed batch of 1 events"])
        self.assertEqual(reporter.messages, received)

    def test_sink_is_optional(self) -> None:
        reporter = ProgressReporter()
        reporter("done")
        self.assertEqual(reporter.messages, ["done"])


class ProgressChannelTestCase(unittest.TestCase):
    def test_reader_sees_worker_messages_until_close(self) -> None:
        channel = ProgressChannel()

        def work() -> None:
            for i in range(3):
                channel(f"step {i}")
            channel.close()

        worker = threading.Thread(target=work)
        worker.start()
        messages = list(channel.iter_messages())
        worker.join()

        self.assertEqual(messages, ["step 0", "step 1", "step 2"])

    def test_writes_fail_after_detach(self) -> None:
        channel = ProgressChannel()
        channel.detach()

        self.assertTrue(channel.detached)
        with self.assertRaises(ProgressChannelClosed):
            channel("too late")
        channel.close()

    def test_detach_releases_a_writer_blocked_on_a_full_channel(self) -> None:
        channel = ProgressChannel(maxsize=1)
        channel("first")
        errors: list[Exception] = []

        def work() -> None:
            try:
                channel("second")
            except ProgressChannelClosed as e:
                errors.append(e)
            channel.close()

        worker = threading.Thread(target=work)
        worker.start()
        channel.detach()
        worker.join(timeout=5)

        self.assertFalse(worker.is_alive())
        self.assertEqual(len(errors), 1)


if __name__ == "__main__":
    unittest.main()
