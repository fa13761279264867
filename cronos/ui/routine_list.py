"""Home panel: the stored routines, each with Start and Delete."""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)

from ..routines.library import RoutineLibrary
from ..routines.models import Routine
from .formatting import KIND_COLORS, format_time


class RoutineListWidget(QWidget):
    """Lists routines; emits requests, never acts on them itself."""

    start_requested = pyqtSignal(object)    # Routine
    delete_requested = pyqtSignal(str)      # routine id

    def __init__(self, library: RoutineLibrary, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._library = library
        self._row_widgets: list[QWidget] = []
        self._start_buttons: list[QPushButton] = []
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(8)

        self._rows_container = QVBoxLayout()
        self._rows_container.setSpacing(8)
        layout.addLayout(self._rows_container)

        self._empty_label = QLabel("No routines yet")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._empty_label)
        layout.addStretch()

    def refresh(self) -> None:
        for w in self._row_widgets:
            w.setParent(None)
            w.deleteLater()
        self._row_widgets.clear()
        self._start_buttons.clear()

        routines = self._library.routines
        self._empty_label.setVisible(not routines)
        for routine in routines:
            row = self._make_row(routine)
            self._rows_container.addWidget(row)
            self._row_widgets.append(row)

    def set_session_active(self, active: bool) -> None:
        """Disable Start buttons while a routine is running."""
        for btn in self._start_buttons:
            btn.setEnabled(not active)

    @property
    def row_count(self) -> int:
        return len(self._row_widgets)

    def _make_row(self, routine: Routine) -> QWidget:
        frame = QFrame(self)
        frame.setObjectName("card")
        row = QHBoxLayout(frame)
        row.setContentsMargins(12, 10, 12, 10)

        info = QVBoxLayout()
        name_lbl = QLabel(routine.name)
        name_lbl.setStyleSheet("font-size: 15px; font-weight: 600;")
        info.addWidget(name_lbl)

        summary = f"{routine.block_count} blocks · {format_time(routine.total_duration)}"
        if routine.last_played is not None:
            summary += f" · last {routine.last_played.strftime('%d %b')}"
        summary_lbl = QLabel(summary)
        summary_lbl.setStyleSheet("font-size: 11px; color: #7A7A9A;")
        info.addWidget(summary_lbl)

        # One coloured dot per block kind, in order
        dots = QLabel(
            "".join(
                f"<span style='color:{KIND_COLORS[b.kind]}'>●</span>"
                for b in routine.blocks
            )
        )
        dots.setTextFormat(Qt.TextFormat.RichText)
        info.addWidget(dots)
        row.addLayout(info, 1)

        start_btn = QPushButton("Start", frame)
        start_btn.setObjectName("primaryButton")
        start_btn.clicked.connect(lambda _=False, r=routine: self.start_requested.emit(r))
        self._start_buttons.append(start_btn)

        delete_btn = QPushButton("Delete", frame)
        delete_btn.setObjectName("secondaryButton")
        delete_btn.clicked.connect(
            lambda _=False, rid=routine.id: self.delete_requested.emit(rid)
        )

        row.addWidget(start_btn)
        row.addWidget(delete_btn)
        return frame
