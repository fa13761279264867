"""History list: every finished session, most recent first."""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QScrollArea, QSizePolicy,
)

from ..history.recorder import HistoryEntry, HistoryRecorder, HistoryStatus
from .formatting import format_time

_STATUS_STYLE: dict[HistoryStatus, tuple[str, str]] = {
    HistoryStatus.COMPLETED: ("COMPLETED", "#A6E3A1"),
    HistoryStatus.ABORTED: ("ABORTED", "#F38BA8"),
}


class HistoryWidget(QWidget):
    """Read-only view over the history recorder."""

    def __init__(self, history: HistoryRecorder, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._history = history
        self._row_widgets: list[QWidget] = []
        self._build_ui()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 8, 0, 0)

        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        outer.addWidget(scroll)

        body = QWidget(scroll)
        scroll.setWidget(body)
        layout = QVBoxLayout(body)
        layout.setSpacing(6)

        self._rows_container = QVBoxLayout()
        self._rows_container.setSpacing(4)
        layout.addLayout(self._rows_container)

        self._empty_label = QLabel("No activity yet")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet("font-size: 12px; color: #7A7A9A;")
        layout.addWidget(self._empty_label)
        layout.addStretch()

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Rebuild the rows from the recorder."""
        for w in self._row_widgets:
            w.setParent(None)
            w.deleteLater()
        self._row_widgets.clear()

        entries = self._history.newest_first()
        self._empty_label.setVisible(not entries)

        for entry in entries:
            row = self._make_row(entry)
            self._rows_container.addWidget(row)
            self._row_widgets.append(row)

    @property
    def row_count(self) -> int:
        return len(self._row_widgets)

    # ── row builder ───────────────────────────────────────────────────

    def _make_row(self, entry: HistoryEntry) -> QWidget:
        frame = QFrame(self)
        frame.setObjectName("card")
        row = QHBoxLayout(frame)
        row.setContentsMargins(12, 8, 12, 8)
        row.setSpacing(8)

        text_col = QVBoxLayout()
        name_lbl = QLabel(entry.routine_name)
        name_lbl.setStyleSheet("font-size: 13px; font-weight: 600;")
        name_lbl.setSizePolicy(
            QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred,
        )
        date_lbl = QLabel(entry.date.strftime("%d %b %H:%M"))
        date_lbl.setStyleSheet("font-size: 11px; color: #7A7A9A;")
        text_col.addWidget(name_lbl)
        text_col.addWidget(date_lbl)

        label, color = _STATUS_STYLE[entry.status]
        status_lbl = QLabel(label)
        status_lbl.setStyleSheet(
            f"font-size: 10px; font-weight: 700; color: {color};"
            f" border: 1px solid {color}; border-radius: 4px; padding: 2px 6px;"
        )
        time_lbl = QLabel(format_time(entry.total_time))
        time_lbl.setStyleSheet("font-size: 12px; color: #7A7A9A;")
        time_lbl.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)

        row.addLayout(text_col)
        row.addWidget(time_lbl)
        row.addWidget(status_lbl)
        return frame
