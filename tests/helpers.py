"""Shared test helpers for Cronos."""

from cronos.ports import Cue
from cronos.routines.models import Block, BlockKind, Routine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Manually advanced wall clock (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingAudio:
    def __init__(self):
        self.cues: list[Cue] = []

    def play_cue(self, cue: Cue) -> None:
        self.cues.append(cue)


class RecordingNotifier:
    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def notify(self, title: str, body: str) -> None:
        self.messages.append((title, body))


class RecordingWakeLock:
    def __init__(self):
        self.acquired = 0
        self.released: list = []
        self.held = False

    def acquire(self):
        self.acquired += 1
        self.held = True
        return f"lock-{self.acquired}"

    def release(self, handle) -> None:
        self.released.append(handle)
        self.held = False


class ExplodingPort:
    """Every port method raises."""

    def play_cue(self, cue):
        raise RuntimeError("no audio device")

    def notify(self, title, body):
        raise RuntimeError("notifications denied")

    def acquire(self):
        raise RuntimeError("wake lock refused")

    def release(self, handle):
        raise RuntimeError("already released")


class DeferredCalls:
    """Collects deferred callbacks instead of scheduling them."""

    def __init__(self):
        self.pending: list[tuple[int, object]] = []

    def __call__(self, delay_ms, callback):
        self.pending.append((delay_ms, callback))

    def run_all(self):
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


def immediate(delay_ms, callback):
    callback()


def make_routine(*blocks: tuple[str, int, BlockKind], name: str = "Test routine") -> Routine:
    return Routine(
        name=name,
        blocks=tuple(Block(n, d, k) for n, d, k in blocks),
    )


def prep_work_routine() -> Routine:
    """[PREP 60s, WORK 20s]"""
    return make_routine(
        ("Warm-up", 60, BlockKind.PREP),
        ("Sprint", 20, BlockKind.WORK),
    )


class BrokenStore:
    """Persistence port whose writes always fail."""

    def load(self, key):
        return None

    def save(self, key, value):
        raise OSError("disk full")
