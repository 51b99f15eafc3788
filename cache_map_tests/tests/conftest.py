import pytest


class FakeTimer:
    """Minimal TimerHandle stand-in recorded by FakeLoop."""

    def __init__(self, when: float, callback, args) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.fired = False
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class FakeLoop:
    """Loop stand-in capturing call_later; advance() fires due timers in order."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (t for t in self.timers if t.when <= self.now and not t.fired and not t.cancelled()),
            key=lambda t: t.when,
        )
        for t in due:
            # An earlier callback may have cancelled this one
            if t.cancelled():
                continue
            t.fired = True
            t.callback(*t.args)

    def live_timers(self):
        return [t for t in self.timers if not t.fired and not t.cancelled()]


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def hook_calls():
    return []


@pytest.fixture
def hook(hook_calls):
    def _hook(key, value):
        hook_calls.append((key, value))
    return _hook
