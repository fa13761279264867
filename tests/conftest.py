"""Shared pytest fixtures for Cronos tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from cronos.database.db import configure_engine, init_db
from cronos.database.store import SqlKeyValueStore
from cronos.history.recorder import HistoryRecorder
from cronos.timer.runner import SessionRunner

from helpers import (
    FakeClock, RecordingAudio, RecordingNotifier, RecordingWakeLock, immediate,
)


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return SqlKeyValueStore()


@pytest.fixture
def history(store):
    return HistoryRecorder(store)


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def wake_lock():
    return RecordingWakeLock()


@pytest.fixture
def runner(qapp, history, audio, notifier, wake_lock, clock):
    """SessionRunner on a fake clock; delayed cues play immediately."""
    return SessionRunner(
        history,
        audio=audio,
        notifier=notifier,
        wake_lock=wake_lock,
        clock=clock,
        defer=immediate,
    )
