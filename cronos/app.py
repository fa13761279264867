"""Main application window for Cronos."""

from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QColor, QIcon, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QTabWidget, QStatusBar,
    QMessageBox, QSystemTrayIcon, QMenu,
)
from loguru import logger

from .audio.sounds import SoundManager
from .database.store import SqlKeyValueStore
from .errors import EmptyRoutine
from .history.recorder import HistoryEntry, HistoryRecorder, HistoryStatus
from .platform.wake_lock import ProcessWakeLock
from .ports import NullWakeLock
from .routines.library import RoutineLibrary
from .routines.models import Routine
from .settings import Settings, load_settings, save_settings
from .timer.runner import SessionRunner
from .timer.session import RunnerState
from .ui.formatting import format_time
from .ui.history_widget import HistoryWidget
from .ui.routine_list import RoutineListWidget
from .ui.runner_widget import RunnerWidget


TAB_ROUTINES, TAB_RUNNER, TAB_HISTORY = range(3)


def _make_icon(color: str = "#CBA6F7") -> QIcon:
    pix = QPixmap(64, 64)
    pix.fill(QColor(0, 0, 0, 0))
    p = QPainter(pix)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setBrush(QColor(color))
    p.setPen(QColor(color).darker(120))
    p.drawEllipse(4, 4, 56, 56)
    p.end()
    return QIcon(pix)


# ── ports backed by Qt ───────────────────────────────────────────────────


class TrayNotifier:
    """Notification port: tray balloon, gated by the user's setting."""

    def __init__(self, tray: QSystemTrayIcon, settings: Settings) -> None:
        self._tray = tray
        self._settings = settings

    def notify(self, title: str, body: str) -> None:
        if not self._settings.notifications_enabled:
            return
        self._tray.showMessage(title, body)


class DialogConfirmation:
    """Confirmation port: a Yes/No message box defaulting to No."""

    def __init__(self, parent: QWidget | None = None) -> None:
        self._parent = parent

    def confirm(self, title: str, question: str) -> bool:
        reply = QMessageBox.question(
            self._parent,
            title,
            question,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes


class CronosApp(QMainWindow):
    """Main application window."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Cronos")
        self.setMinimumSize(380, 600)

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = load_settings()

        # ── geometry save timer ───────────────────────────────────────
        self._geometry_save_timer = QTimer(self)
        self._geometry_save_timer.setSingleShot(True)
        self._geometry_save_timer.setInterval(500)
        self._geometry_save_timer.timeout.connect(self._save_geometry)

        # ── storage ───────────────────────────────────────────────────
        store = SqlKeyValueStore()
        self._library = RoutineLibrary(store)
        self._history = HistoryRecorder(store)

        # ── system tray (also carries notifications) ──────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(_make_icon())
        self._tray_icon.setToolTip("Cronos")
        self._build_tray_menu()
        self._tray_icon.show()

        # ── ports ─────────────────────────────────────────────────────
        self._sound_manager = SoundManager(parent=self)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)
        self._confirmation = DialogConfirmation(self)
        wake_lock = (
            ProcessWakeLock() if self._settings.keep_screen_awake else NullWakeLock()
        )

        # ── runner ────────────────────────────────────────────────────
        self._runner = SessionRunner(
            self._history,
            self,
            audio=self._sound_manager,
            notifier=TrayNotifier(self._tray_icon, self._settings),
            wake_lock=wake_lock,
            poll_interval_ms=self._settings.poll_interval_ms,
            start_cue_delay_ms=self._settings.start_cue_delay_ms,
            countdown_cues=self._settings.countdown_cues,
            on_started=lambda routine, when: self._library.mark_played(routine.id, when),
        )

        # ── central widget ────────────────────────────────────────────
        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QVBoxLayout(central)
        root_layout.setContentsMargins(16, 12, 16, 12)

        self._tabs = QTabWidget(central)
        root_layout.addWidget(self._tabs)

        self._routine_list = RoutineListWidget(self._library, self._tabs)
        self._routine_list.start_requested.connect(self._start_routine)
        self._routine_list.delete_requested.connect(self._delete_routine)
        self._tabs.addTab(self._routine_list, "Routines")

        self._runner_widget = RunnerWidget(
            self._runner, self._tabs, adjust_step=self._settings.adjust_step_seconds,
        )
        self._runner_widget.quit_requested.connect(self._quit_session)
        self._tabs.addTab(self._runner_widget, "Runner")

        self._history_widget = HistoryWidget(self._history, self._tabs)
        self._tabs.addTab(self._history_widget, "History")

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready")

        # ── wire signals ──────────────────────────────────────────────
        self._runner.state_changed.connect(self._on_state_changed)
        self._runner.tick.connect(self._on_tick)
        self._runner.session_finished.connect(self._on_session_finished)

        self._restore_geometry()

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        menu = QMenu(self)

        pause_action = menu.addAction("Pause / Resume")
        pause_action.triggered.connect(lambda: self._runner.toggle_pause())

        skip_action = menu.addAction("Skip block")
        skip_action.triggered.connect(lambda: self._runner.skip())

        menu.addSeparator()
        show_action = menu.addAction("Show Cronos")
        show_action.triggered.connect(self._show_window)

        menu.addSeparator()
        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self.close)

        self._tray_icon.setContextMenu(menu)

    def _show_window(self) -> None:
        self.showNormal()
        self.raise_()
        self.activateWindow()

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def _start_routine(self, routine: Routine) -> None:
        try:
            session = self._runner.start(routine)
        except EmptyRoutine:
            self._status_bar.showMessage(f"{routine.name} has no blocks")
            return
        if session is not None:
            self._tabs.setCurrentIndex(TAB_RUNNER)

    def _delete_routine(self, routine_id: str) -> None:
        routine = self._library.get(routine_id)
        if routine is None:
            return
        if not self._confirmation.confirm("Delete routine?", f"Delete {routine.name}?"):
            return
        self._library.delete(routine_id)
        self._routine_list.refresh()

    def _quit_session(self) -> bool:
        """Ask, then abort the running session.  Returns True if it ended."""
        if not self._runner.is_active:
            return True
        if not self._confirmation.confirm("End routine?", "Stop the running routine?"):
            return False
        self._runner.quit()
        return True

    # ══════════════════════════════════════════════════════════════════
    #  RUNNER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, state: RunnerState) -> None:
        self._routine_list.set_session_active(state != RunnerState.IDLE)
        session = self._runner.session
        if state == RunnerState.PAUSED:
            self._status_bar.showMessage("Paused")
        elif state == RunnerState.RUNNING and session is not None:
            self._status_bar.showMessage(session.current_block.name)
        else:
            self._status_bar.showMessage("Ready")
            self._tray_icon.setToolTip("Cronos")

    def _on_tick(self, remaining: int) -> None:
        session = self._runner.session
        if session is not None:
            self._tray_icon.setToolTip(
                f"Cronos · {session.current_block.name} {format_time(remaining)}"
            )

    def _on_session_finished(self, entry: HistoryEntry) -> None:
        self._history_widget.refresh()
        self._routine_list.refresh()
        if entry.status == HistoryStatus.COMPLETED:
            self._status_bar.showMessage(f"{entry.routine_name} complete!")
            self._tabs.setCurrentIndex(TAB_HISTORY)
        else:
            self._tabs.setCurrentIndex(TAB_ROUTINES)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE
    # ══════════════════════════════════════════════════════════════════

    def _restore_geometry(self) -> None:
        s = self._settings
        self.resize(s.window_width, s.window_height)
        if s.window_x is not None and s.window_y is not None:
            self.move(s.window_x, s.window_y)

    def _save_geometry(self) -> None:
        geo = self.geometry()
        self._settings.window_x = geo.x()
        self._settings.window_y = geo.y()
        self._settings.window_width = geo.width()
        self._settings.window_height = geo.height()
        try:
            save_settings(self._settings)
        except OSError as exc:
            logger.warning("Could not save window geometry: {}", exc)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Closing with a routine running ends it as aborted, after asking."""
        if not self._quit_session():
            event.ignore()
            return
        self._save_geometry()
        self._tray_icon.hide()
        event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._geometry_save_timer.start()

    def moveEvent(self, event) -> None:  # type: ignore[override]
        super().moveEvent(event)
        self._geometry_save_timer.start()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space pauses/resumes, arrows adjust time, Escape stops."""
        key = event.key()
        step = self._settings.adjust_step_seconds
        if key == Qt.Key.Key_Space and not event.modifiers():
            self._runner.toggle_pause()
        elif key == Qt.Key.Key_Right:
            self._runner.adjust_time(step)
        elif key == Qt.Key.Key_Left:
            self._runner.adjust_time(-step)
        elif key == Qt.Key.Key_Escape:
            self._quit_session()
        else:
            super().keyPressEvent(event)
            return
        event.accept()
