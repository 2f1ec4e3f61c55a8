# tests/test_desktop_notifier.py

from __future__ import annotations

import io
import subprocess

from planify_today.connectors.desktop_notifier import FanoutNotifier, NotifySendNotifier
from planify_today.core.ports import DueNotification, NotificationAction

from .fakes import FakeNotifier


class FakeLoop:
    def __init__(self) -> None:
        self.readers: dict[int, tuple] = {}

    def add_reader(self, fd, callback, *args) -> None:
        self.readers[fd] = (callback, args)

    def remove_reader(self, fd) -> bool:
        return self.readers.pop(fd, None) is not None


class FakeStdout(io.StringIO):
    def fileno(self) -> int:
        return 99


class FakeProc:
    def __init__(self, output: str) -> None:
        self.stdout = FakeStdout(output)
        self.returncode: int | None = None
        self.terminated = False
        self.waited: list[float | None] = []

    def poll(self):
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15

    def kill(self) -> None:
        self.returncode = -9

    def wait(self, timeout=None):
        self.waited.append(timeout)
        if self.returncode is None:
            self.returncode = 0
        return self.returncode


def _notification(invoked: list[str]) -> DueNotification:
    return DueNotification(
        task_id="42",
        title="Call Bob",
        body="Due at 09:00",
        actions=[
            NotificationAction("open", "Open Planify", lambda: invoked.append("open")),
            NotificationAction("done", "Mark done", lambda: invoked.append("done")),
        ],
    )


def _notifier(loop: FakeLoop, proc: FakeProc, calls: list, *, which=lambda _: "/usr/bin/notify-send"):
    def popen(argv, **kwargs):
        calls.append((argv, kwargs))
        return proc

    return NotifySendNotifier(loop, popen=popen, which=which)


def test_argv_carries_actions_and_waits() -> None:
    notifier = NotifySendNotifier(FakeLoop(), which=lambda _: None)
    argv = notifier.build_argv(_notification([]))
    assert argv == [
        "notify-send",
        "--app-name=Planify",
        "--icon=io.github.alainm23.planify",
        "--action=open=Open Planify",
        "--action=done=Mark done",
        "--wait",
        "Call Bob",
        "Due at 09:00",
    ]


def test_chosen_action_runs_on_loop_reader() -> None:
    loop, proc, calls, invoked = FakeLoop(), FakeProc("done\n"), [], []
    notifier = _notifier(loop, proc, calls)

    notifier.notify(_notification(invoked))

    assert calls[0][1]["stdout"] is subprocess.PIPE
    callback, args = loop.readers[99]
    callback(*args)

    assert invoked == ["done"]
    assert loop.readers == {}


def test_dismissed_notification_runs_nothing() -> None:
    loop, proc, invoked = FakeLoop(), FakeProc(""), []
    notifier = _notifier(loop, proc, [])
    notifier.notify(_notification(invoked))
    callback, args = loop.readers[99]
    callback(*args)
    assert invoked == []


def test_missing_command_warns_once(caplog) -> None:
    calls: list = []
    notifier = _notifier(FakeLoop(), FakeProc(""), calls, which=lambda _: None)
    notifier.notify(_notification([]))
    notifier.notify(_notification([]))
    assert calls == []
    assert caplog.text.count("notify-send not found") == 1


def test_close_terminates_pending() -> None:
    loop, proc = FakeLoop(), FakeProc("")
    notifier = _notifier(loop, proc, [])
    notifier.notify(_notification([]))
    notifier.close()
    assert proc.terminated
    assert loop.readers == {}


def test_fanout_isolates_failures() -> None:
    class Broken:
        def notify(self, notification) -> None:
            raise RuntimeError("dbus down")

        def close(self) -> None:
            raise RuntimeError("dbus down")

    good = FakeNotifier()
    fanout = FanoutNotifier([Broken(), good])
    fanout.notify(_notification([]))
    fanout.close()

    assert len(good.sent) == 1
    assert good.closed == 1


def test_answered_child_is_reaped_once_it_exits() -> None:
    loop, proc = FakeLoop(), FakeProc("open\n")
    notifier = _notifier(loop, proc, [])
    notifier.notify(_notification([]))
    callback, args = loop.readers[99]
    callback(*args)

    # notify-send may still be running right after it printed the action.
    assert notifier.finishing == [proc]

    proc.returncode = 0
    notifier.notify(_notification([]))
    assert proc not in notifier.finishing


def test_close_waits_for_answered_children() -> None:
    loop, proc = FakeLoop(), FakeProc("done\n")
    notifier = _notifier(loop, proc, [])
    notifier.notify(_notification([]))
    callback, args = loop.readers[99]
    callback(*args)

    notifier.close()

    assert proc.waited == [1]
    assert notifier.finishing == []
