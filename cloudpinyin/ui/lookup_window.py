"""Small host window that exercises cloud lookups interactively."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from ..services.candidates import Candidate, CandidateType, ParserStatus, SelectResult
from ..services.cloud_candidates import CloudCandidates
from ..services.cloud_client import CloudSource, CloudTransport
from ..services.response_parser import ParseOutcome
from ..services.settings_service import CloudSettingsService


logger = logging.getLogger(__name__)


class CloudLookupWindow(QWidget):
    """Minimal pinyin editor: the typed text is its only local candidate."""

    def __init__(
        self,
        settings_service: CloudSettingsService,
        transport: CloudTransport,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.settings_service = settings_service
        self._candidates: list[Candidate] = []
        self._committed: list[str] = []
        self.cloud = CloudCandidates(self, settings_service, transport, parent=self)
        self.cloud.request_issued.connect(self._on_request_issued)
        self.cloud.response_processed.connect(self._on_response_processed)

        self.setWindowTitle("Cloud Pinyin")
        self.resize(420, 360)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        options_row = QHBoxLayout()
        self.source_combo = QComboBox(self)
        for source in CloudSource:
            self.source_combo.addItem(source.value.title(), source.value)
        self.source_combo.setCurrentIndex(self.source_combo.findData(settings_service.source.value))
        self.source_combo.currentIndexChanged.connect(self._on_source_changed)
        options_row.addWidget(QLabel("Provider", self))
        options_row.addWidget(self.source_combo, 1)
        self.count_spin = QSpinBox(self)
        self.count_spin.setRange(1, 10)
        self.count_spin.setValue(settings_service.candidates_number)
        self.count_spin.valueChanged.connect(settings_service.set_candidates_number)
        options_row.addWidget(QLabel("Candidates", self))
        options_row.addWidget(self.count_spin)
        layout.addLayout(options_row)

        self.input = QLineEdit(self)
        self.input.setPlaceholderText("Type pinyin, e.g. nihao")
        self.input.textChanged.connect(self._on_text_changed)
        self.input.returnPressed.connect(self._commit_current_row)
        layout.addWidget(self.input)

        self.candidate_list = QListWidget(self)
        self.candidate_list.itemActivated.connect(self._on_item_activated)
        layout.addWidget(self.candidate_list, 1)

        self.status_label = QLabel("", self)
        layout.addWidget(self.status_label)
        self.committed_label = QLabel("", self)
        self.committed_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self.committed_label)

    # ------------------------------------------------------------------
    # Editor interface used by CloudCandidates
    @property
    def text(self) -> str:
        return self.input.text()

    def full_pinyin_buffer(self) -> str:
        return self.input.text()

    def refresh_candidates(self) -> None:
        row = self.candidate_list.currentRow()
        self._rebuild_candidates()
        if 0 <= row < self.candidate_list.count():
            self.candidate_list.setCurrentRow(row)

    @property
    def candidates(self) -> list[Candidate]:
        return self._candidates

    @property
    def committed_text(self) -> str:
        return "".join(self._committed)

    # ------------------------------------------------------------------
    def _rebuild_candidates(self) -> None:
        text = self.text
        candidates: list[Candidate] = []
        if text:
            candidates.append(Candidate(text=text, kind=CandidateType.NBEST_MATCH))
            candidates.append(Candidate(text=text[:1], kind=CandidateType.NORMAL))
        self.cloud.process_candidates(candidates)
        self._candidates = candidates
        self.candidate_list.clear()
        for candidate in candidates:
            self.candidate_list.addItem(QListWidgetItem(candidate.display_text))

    def _on_text_changed(self, _text: str) -> None:
        self._rebuild_candidates()
        if self.candidate_list.count():
            self.candidate_list.setCurrentRow(0)

    def _on_source_changed(self, index: int) -> None:
        value = self.source_combo.itemData(index)
        if isinstance(value, str):
            self.settings_service.set_source(value)

    def _commit_current_row(self) -> None:
        item = self.candidate_list.currentItem()
        if item is not None:
            self._on_item_activated(item)

    def _on_item_activated(self, item: QListWidgetItem) -> None:
        row = self.candidate_list.row(item)
        if not 0 <= row < len(self._candidates):
            return
        candidate = self._candidates[row]
        if candidate.is_cloud:
            result = self.cloud.select_candidate(candidate)
            if SelectResult.COMMIT not in result:
                return
            if SelectResult.MODIFY_IN_PLACE in result:
                item.setText(candidate.display_text)
        self.commit(candidate.commit_text)

    def commit(self, text: str) -> None:
        logger.info("Committing candidate", extra={"text": text})
        self._committed.append(text)
        self.committed_label.setText(self.committed_text)
        self.cloud.reset()
        self.input.clear()

    def _on_request_issued(self, url: str) -> None:
        self.status_label.setText("Looking up…")
        self.status_label.setToolTip(url)

    def _on_response_processed(self, outcome: ParseOutcome) -> None:
        if outcome.status is ParserStatus.OK:
            self.status_label.setText(f"{len(outcome.words)} cloud candidate(s)")
        else:
            self.status_label.setText(outcome.status.value.replace("_", " ").capitalize())


__all__ = ["CloudLookupWindow"]
