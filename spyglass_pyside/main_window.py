"""Main application window -- binds the Spyglass core to widgets and shortcuts."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QEvent, Qt, Slot
from PySide6.QtGui import QAction, QCloseEvent, QIcon, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMenuBar,
    QProgressBar,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from .controllers.core import SpyglassCore
from .controllers.index_monitor import IndexState
from .controllers.navigation import DirectoryListing
from .controllers.search import SearchMode
from .controllers.window_geometry import LayoutMode
from .dialogs.settings_dialog import SettingsDialog
from .utils.config import AppConfig, ConfigSync
from .utils.index_service import IndexProgress, IndexService
from .utils.telemetry import log_info
from .views.breadcrumb_bar import BreadcrumbBar
from .views.file_list_view import FileListView
from .views.session_cards import SessionCardBar
from .widgets.search_bar import SearchBar
from .workers.service_worker import ServiceWorker


class MainWindow(QMainWindow):
    """Thin shell over :class:`SpyglassCore`; holds no navigation state itself."""

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(self, config: AppConfig, service: IndexService) -> None:
        super().__init__()
        log_info("initializing main window")

        self._config = config
        self._config_sync = ConfigSync(config)
        self._worker = ServiceWorker(parent=self)
        self._settings_dialog: Optional[SettingsDialog] = None

        self._core = SpyglassCore(
            self._config_sync,
            service,
            self._worker,
            window=self,
            write_text=self._write_clipboard,
            parent=self,
        )

        self.setWindowTitle("Spyglass")
        self.setMinimumSize(320, 80)

        self._build_menu_bar()
        self._build_central_widget()
        self._build_status_bar()

        self._connect_signals()
        self._apply_display_settings()

    @property
    def core(self) -> SpyglassCore:
        return self._core

    def start(self) -> None:
        """Restore sessions and geometry, then kick off indexing."""
        self._core.initialize()
        self._refresh_search_chrome()

    # ------------------------------------------------------------------
    # Menu bar
    # ------------------------------------------------------------------

    def _themed_icon(self, *names: str) -> QIcon:
        for name in names:
            icon = QIcon.fromTheme(name)
            if not icon.isNull():
                return icon
        return QIcon()

    def _build_menu_bar(self) -> None:
        menu_bar: QMenuBar = self.menuBar()

        # -- File -------------------------------------------------------
        file_menu = menu_bar.addMenu("&File")

        self._act_new_tab = QAction(self._themed_icon("tab-new"), "Open in &New Tab", self)
        self._act_new_tab.setShortcut(QKeySequence.StandardKey.AddTab)  # Ctrl+T
        file_menu.addAction(self._act_new_tab)

        self._act_close_tab = QAction(self._themed_icon("tab-close"), "&Close Tab", self)
        self._act_close_tab.setShortcut(QKeySequence.StandardKey.Close)  # Ctrl+W
        file_menu.addAction(self._act_close_tab)

        file_menu.addSeparator()

        self._act_settings = QAction(self._themed_icon("configure"), "&Settings...", self)
        self._act_settings.setShortcut(QKeySequence(Qt.Modifier.CTRL | Qt.Key.Key_Comma))
        file_menu.addAction(self._act_settings)

        self._act_quit = QAction(self._themed_icon("application-exit"), "&Quit", self)
        self._act_quit.setShortcut(QKeySequence.StandardKey.Quit)  # Ctrl+Q
        file_menu.addAction(self._act_quit)

        # -- Go ---------------------------------------------------------
        go_menu = menu_bar.addMenu("&Go")

        self._act_back = QAction(self._themed_icon("go-previous"), "&Back", self)
        self._act_back.setShortcuts([QKeySequence(Qt.Key.Key_Backspace), QKeySequence("Alt+Left")])
        go_menu.addAction(self._act_back)

        self._act_clear_search = QAction("Clear &Search", self)
        self._act_clear_search.setShortcut(QKeySequence(Qt.Key.Key_Escape))
        go_menu.addAction(self._act_clear_search)

        self._act_toggle_search_mode = QAction("Toggle Search &Mode", self)
        self._act_toggle_search_mode.setShortcut(QKeySequence("Ctrl+I"))
        go_menu.addAction(self._act_toggle_search_mode)

        # -- View -------------------------------------------------------
        view_menu = menu_bar.addMenu("&View")

        self._act_focus_mode = QAction(self._themed_icon("view-restore"), "&Focus Mode", self)
        self._act_focus_mode.setCheckable(True)
        self._act_focus_mode.setShortcut(QKeySequence("Ctrl+Shift+F"))
        view_menu.addAction(self._act_focus_mode)

        # -- Tools ------------------------------------------------------
        tools_menu = menu_bar.addMenu("&Tools")

        self._act_reindex = QAction(self._themed_icon("view-refresh"), "&Re-index Files", self)
        self._act_reindex.setShortcut(QKeySequence("Ctrl+R"))
        tools_menu.addAction(self._act_reindex)

        # The menu bar is hidden in focus mode; shortcuts must outlive it.
        self.addActions([
            self._act_new_tab, self._act_close_tab, self._act_settings, self._act_quit,
            self._act_back, self._act_clear_search, self._act_toggle_search_mode,
            self._act_focus_mode, self._act_reindex,
        ])

    # ------------------------------------------------------------------
    # Central widget
    # ------------------------------------------------------------------

    def _build_central_widget(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(4)

        self._card_bar = SessionCardBar(central)
        layout.addWidget(self._card_bar)

        # Everything below the cards disappears while a focus card is collapsed.
        self._content = QWidget(central)
        content_layout = QVBoxLayout(self._content)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(4)

        self._breadcrumb_bar = BreadcrumbBar(self._content)
        content_layout.addWidget(self._breadcrumb_bar)

        self._search_bar = SearchBar(self._content)
        content_layout.addWidget(self._search_bar)

        self._file_list = FileListView(self._content)
        content_layout.addWidget(self._file_list, 1)

        layout.addWidget(self._content, 1)
        self.setCentralWidget(central)

    # ------------------------------------------------------------------
    # Status bar
    # ------------------------------------------------------------------

    def _build_status_bar(self) -> None:
        status_bar: QStatusBar = self.statusBar()
        self._index_progress = QProgressBar()
        self._index_progress.setMaximumWidth(160)
        self._index_progress.setTextVisible(False)
        self._index_progress.setVisible(False)
        self._status_summary = QLabel("Ready")
        status_bar.addPermanentWidget(self._index_progress)
        status_bar.addPermanentWidget(self._status_summary)

    # ------------------------------------------------------------------
    # Signal connections
    # ------------------------------------------------------------------

    def _connect_signals(self) -> None:
        core = self._core

        # Core -> widgets
        core.store.sessions_changed.connect(self._refresh_cards)
        core.navigation.listing_changed.connect(self._on_listing_changed)
        core.search.results_changed.connect(self._refresh_entries)
        core.search.query_changed.connect(self._on_query_changed)
        core.search.mode_changed.connect(lambda _mode: self._refresh_search_chrome())
        core.index_monitor.state_changed.connect(self._on_index_state_changed)
        core.index_monitor.progress_changed.connect(self._on_index_progress)
        core.index_monitor.file_count_changed.connect(lambda _count: self._refresh_search_chrome())
        core.geometry.mode_changed.connect(self._on_layout_mode_changed)
        core.clipboard.copied_changed.connect(self._on_copied_changed)

        # Widgets -> core
        self._card_bar.gesture_completed.connect(core.apply_gesture)
        self._card_bar.copy_path_requested.connect(core.copy_path)
        self._card_bar.recolor_requested.connect(core.recolor_tab)
        self._card_bar.close_requested.connect(core.close_tab)
        self._breadcrumb_bar.back_requested.connect(core.navigate_back)
        self._breadcrumb_bar.segment_activated.connect(core.open_breadcrumb)
        self._search_bar.query_changed.connect(core.set_query)
        self._search_bar.mode_toggle_requested.connect(core.toggle_search_mode)
        self._search_bar.selection_step_requested.connect(self._file_list.move_selection)
        self._search_bar.submit_requested.connect(self._file_list.activate_current)
        self._file_list.entry_clicked.connect(lambda entry: core.copy_path(entry.path))
        self._file_list.entry_activated.connect(core.activate_entry)
        self._file_list.copy_path_requested.connect(core.copy_path)
        self._file_list.open_in_new_tab_requested.connect(core.open_in_new_tab)

        # Actions
        self._act_new_tab.triggered.connect(lambda: core.open_in_new_tab())
        self._act_close_tab.triggered.connect(lambda: core.close_tab())
        self._act_settings.triggered.connect(self._open_settings)
        self._act_quit.triggered.connect(self.close)
        self._act_back.triggered.connect(core.navigate_back)
        self._act_clear_search.triggered.connect(core.clear_search)
        self._act_toggle_search_mode.triggered.connect(core.toggle_search_mode)
        self._act_focus_mode.triggered.connect(lambda _checked: core.toggle_focus_mode())
        self._act_reindex.triggered.connect(core.reindex)

    # ------------------------------------------------------------------
    # Core -> widget slots
    # ------------------------------------------------------------------

    @Slot()
    def _refresh_cards(self) -> None:
        self._card_bar.set_sessions(self._core.store.sessions, self._core.store.active_id)
        self._breadcrumb_bar.set_segments(self._core.navigation.breadcrumbs())

    @Slot(object)
    def _on_listing_changed(self, listing: DirectoryListing) -> None:
        self._breadcrumb_bar.set_segments(self._core.navigation.breadcrumbs())
        self._file_list.set_loading(listing.is_loading)
        if listing.error_message:
            self.statusBar().showMessage(listing.error_message, 5000)
        self._refresh_entries()

    @Slot()
    def _refresh_entries(self) -> None:
        search = self._core.search
        grouped = bool(search.query) and search.mode is SearchMode.INDEXED
        self._file_list.set_entries(search.visible_entries(), grouped, search.empty_text())

    @Slot(str)
    def _on_query_changed(self, text: str) -> None:
        self._search_bar.search_text = text

    @Slot(object)
    def _on_index_state_changed(self, state: IndexState) -> None:
        self._index_progress.setVisible(state is IndexState.BUILDING)
        self._act_reindex.setEnabled(state is not IndexState.BUILDING)
        self._refresh_search_chrome()
        self._refresh_settings_index_status()

    @Slot(object)
    def _on_index_progress(self, progress: IndexProgress) -> None:
        if progress.is_complete:
            self._status_summary.setText(f"{progress.total_files:,} files indexed")
        else:
            self._index_progress.setRange(0, max(progress.total_folders, 1))
            self._index_progress.setValue(progress.indexed_folders)
            self._status_summary.setText(
                f"Indexing {progress.indexed_folders:,}/{progress.total_folders:,} folders"
            )
        self._refresh_settings_index_status()

    @Slot(object)
    def _on_layout_mode_changed(self, mode: LayoutMode) -> None:
        self._act_focus_mode.setChecked(mode is not LayoutMode.NORMAL)
        self._content.setVisible(mode is not LayoutMode.FOCUS_COLLAPSED)
        self.statusBar().setVisible(mode is not LayoutMode.FOCUS_COLLAPSED)
        self.menuBar().setVisible(mode is LayoutMode.NORMAL)

    @Slot(object)
    def _on_copied_changed(self, path: Optional[str]) -> None:
        self._file_list.set_copied_path(path)
        if path:
            self.statusBar().showMessage(f"Copied: {path}", 2000)

    def _refresh_search_chrome(self) -> None:
        search = self._core.search
        self._search_bar.set_mode(search.mode)
        self._search_bar.set_placeholder(search.placeholder_text())

    def _refresh_settings_index_status(self) -> None:
        if self._settings_dialog is not None:
            self._settings_dialog.set_index_status(
                self._status_summary.text(), self._core.index_monitor.is_building
            )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _apply_display_settings(self) -> None:
        self._file_list.set_show_paths(self._config.show_paths)
        self._card_bar.set_show_paths(self._config.show_paths)

    def _open_settings(self) -> None:
        dialog = SettingsDialog(self._config, self._status_summary.text(), self)
        dialog.set_index_status(self._status_summary.text(), self._core.index_monitor.is_building)
        dialog.reindex_requested.connect(self._core.reindex)
        self._settings_dialog = dialog
        try:
            if dialog.exec() != SettingsDialog.DialogCode.Accepted:
                return
            updates = dialog.get_config_updates()
        finally:
            self._settings_dialog = None

        self._config.show_paths = updates["show_paths"]
        self._config.projects_root = updates["projects_root"]
        self._core.set_reset_to_pinned_on_collapse(updates["reset_to_pinned_on_collapse"])
        self._config_sync.save()
        self._apply_display_settings()
        self._refresh_cards()
        log_info("settings updated", **updates)

    # ------------------------------------------------------------------
    # Window events -> geometry state machine
    # ------------------------------------------------------------------

    def resizeEvent(self, event) -> None:  # noqa: N802
        super().resizeEvent(event)
        self._core.geometry.on_window_resized()

    def enterEvent(self, event) -> None:  # noqa: N802
        super().enterEvent(event)
        self._core.geometry.on_pointer_entered()

    def leaveEvent(self, event) -> None:  # noqa: N802
        super().leaveEvent(event)
        self._core.geometry.on_pointer_left()

    def changeEvent(self, event: QEvent) -> None:  # noqa: N802
        super().changeEvent(event)
        if event.type() == QEvent.Type.ActivationChange and not self.isActiveWindow():
            self._core.geometry.on_window_deactivated()

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        log_info("main window close event")
        self._core.shutdown()
        self._config_sync.save()
        log_info("configuration persisted on close")
        super().closeEvent(event)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _write_clipboard(text: str) -> None:
        clipboard = QApplication.clipboard()
        if clipboard is None:
            raise RuntimeError("clipboard unavailable")
        clipboard.setText(text)
