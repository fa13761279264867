"""Runner panel: the live countdown for the active session.

Layout (top → bottom):
    - Routine name + block position
    - Block kind label and name
    - Large mm:ss countdown and block progress bar
    - "Up next" line
    - Controls: -10s · Pause/Resume · +10s · Skip · Stop
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFrame, QProgressBar,
)

from ..timer.runner import SessionRunner
from ..timer.session import RunnerState
from .formatting import KIND_COLORS, KIND_LABELS, format_time


class RunnerWidget(QWidget):
    """Shows and controls whatever the runner is doing."""

    quit_requested = pyqtSignal()

    def __init__(
        self,
        runner: SessionRunner,
        parent: QWidget | None = None,
        *,
        adjust_step: int = 10,
    ) -> None:
        super().__init__(parent)
        self._runner = runner
        self._adjust_step = adjust_step
        self._build_ui()
        self._connect_signals()
        self._on_state_changed(runner.state)

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(24, 20, 24, 24)
        layout.setSpacing(8)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._routine_lbl = QLabel("", card)
        self._routine_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._routine_lbl.setStyleSheet("font-size: 14px; font-weight: 600;")
        layout.addWidget(self._routine_lbl)

        self._kind_lbl = QLabel("", card)
        self._kind_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._kind_lbl)

        self._block_lbl = QLabel("", card)
        self._block_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._block_lbl.setStyleSheet("font-size: 20px;")
        layout.addWidget(self._block_lbl)

        self._time_lbl = QLabel("00:00", card)
        self._time_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_lbl.setStyleSheet(
            "font-size: 64px; font-weight: 700; font-family: Menlo, monospace;"
        )
        layout.addWidget(self._time_lbl)

        self._progress = QProgressBar(card)
        self._progress.setRange(0, 1000)
        self._progress.setTextVisible(False)
        self._progress.setFixedHeight(6)
        layout.addWidget(self._progress)

        self._next_lbl = QLabel("", card)
        self._next_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._next_lbl.setStyleSheet("font-size: 12px; color: #7A7A9A;")
        layout.addWidget(self._next_lbl)

        layout.addSpacing(12)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(8)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._minus_btn = QPushButton(f"-{self._adjust_step}s", card)
        self._pause_btn = QPushButton("Pause", card)
        self._pause_btn.setObjectName("primaryButton")
        self._plus_btn = QPushButton(f"+{self._adjust_step}s", card)
        self._skip_btn = QPushButton("Skip", card)
        self._stop_btn = QPushButton("Stop", card)
        self._stop_btn.setObjectName("dangerButton")

        for btn in (
            self._minus_btn, self._pause_btn, self._plus_btn,
            self._skip_btn, self._stop_btn,
        ):
            btn_row.addWidget(btn)
        layout.addLayout(btn_row)

        self._idle_lbl = QLabel("Pick a routine to get started.", card)
        self._idle_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._idle_lbl)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._pause_btn.clicked.connect(self._runner.toggle_pause)
        self._skip_btn.clicked.connect(self._runner.skip)
        self._minus_btn.clicked.connect(
            lambda: self._runner.adjust_time(-self._adjust_step)
        )
        self._plus_btn.clicked.connect(
            lambda: self._runner.adjust_time(self._adjust_step)
        )
        self._stop_btn.clicked.connect(lambda: self.quit_requested.emit())

        self._runner.tick.connect(self._refresh_time)
        self._runner.state_changed.connect(self._on_state_changed)
        self._runner.block_changed.connect(self._on_block_changed)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_state_changed(self, state: RunnerState) -> None:
        active = state != RunnerState.IDLE
        for w in (
            self._routine_lbl, self._kind_lbl, self._block_lbl,
            self._time_lbl, self._progress, self._next_lbl,
            self._minus_btn, self._pause_btn, self._plus_btn,
            self._skip_btn, self._stop_btn,
        ):
            w.setVisible(active)
        self._idle_lbl.setVisible(not active)

        self._pause_btn.setText("Resume" if state == RunnerState.PAUSED else "Pause")
        if active:
            self._on_block_changed(self._runner.session.current_block_index)
        self._refresh_time(self._runner.remaining)

    def _on_block_changed(self, index: int) -> None:
        session = self._runner.session
        if session is None:
            return
        block = session.current_block
        total = session.routine.block_count
        self._routine_lbl.setText(f"{session.routine.name} · {index + 1}/{total}")
        self._kind_lbl.setText(KIND_LABELS[block.kind])
        self._kind_lbl.setStyleSheet(
            f"font-size: 12px; font-weight: 700; letter-spacing: 2px;"
            f" color: {KIND_COLORS[block.kind]};"
        )
        self._block_lbl.setText(block.name)

        nxt = session.next_block
        if nxt is None:
            self._next_lbl.setText("Last block")
        else:
            self._next_lbl.setText(f"Up next: {nxt.name} ({format_time(nxt.duration)})")

    def _refresh_time(self, remaining: int) -> None:
        self._time_lbl.setText(format_time(remaining))
        self._progress.setValue(int(self._runner.progress * 1000))

    # ── introspection (tests / shortcuts) ─────────────────────────────────

    @property
    def time_text(self) -> str:
        return self._time_lbl.text()

    @property
    def pause_button_text(self) -> str:
        return self._pause_btn.text()
