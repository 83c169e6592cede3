"""Shared fakes for fwatcher tests."""

import pytest

from fwatcher.errors import WatchSourceError


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeProcess:
    def __init__(self, argv, pid):
        self.argv = list(argv)
        self.pid = pid
        self.terminate_calls = 0

    def terminate(self):
        self.terminate_calls += 1


class FakeLauncher:
    """Records spawned commands instead of starting processes."""

    def __init__(self, fail=False):
        self.fail = fail
        self.spawned = []
        self.log = []

    def __call__(self, argv):
        if self.fail:
            self.log.append(("spawn-failed", list(argv)))
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        proc = FakeProcess(argv, pid=1000 + len(self.spawned))
        self.spawned.append(proc)
        self.log.append(("spawn", proc.pid))
        return proc


class FakeSource:
    """Watch source that replays a fixed list of events, then closes."""

    def __init__(self, events=(), fail_on_start=None):
        self.events = list(events)
        self.fail_on_start = fail_on_start
        self.started = False
        self.stopped = False

    def start(self):
        if self.fail_on_start is not None:
            raise self.fail_on_start
        self.started = True

    def __iter__(self):
        for event in self.events:
            yield event
        raise WatchSourceError("watch source closed")

    def stop(self):
        self.stopped = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def launcher():
    return FakeLauncher()
