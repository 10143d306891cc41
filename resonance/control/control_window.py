# resonance/control/control_window.py
import copy
import logging

from PyQt5 import QtWidgets, QtCore, QtGui

from .config import DEFAULTS
from .settings_tab import SettingsTab
from .signature_tab import SignatureTab

log = logging.getLogger(__name__)


class ControlWindow(QtWidgets.QMainWindow):
    def __init__(self, app: QtWidgets.QApplication, screen: QtGui.QScreen, view_win):
        super().__init__(None)
        self.setWindowTitle("Resonance — Contrôle")
        self.view_win = view_win
        self.state = copy.deepcopy(DEFAULTS)
        # Aucune signature avant une analyse chargée ou une édition.
        self.state["signature"] = None
        self.state["processing"] = False

        self._apply_theme()

        # Barre d’outils
        toolbar = QtWidgets.QToolBar("Main")
        toolbar.setMovable(False)
        toolbar.setFloatable(False)
        toolbar.setIconSize(QtCore.QSize(18, 18))
        toolbar.setToolButtonStyle(QtCore.Qt.ToolButtonIconOnly)
        self.addToolBar(QtCore.Qt.TopToolBarArea, toolbar)

        style = self.style()

        act_quit = QtWidgets.QAction(
            style.standardIcon(QtWidgets.QStyle.SP_TitleBarCloseButton), "Quitter", self
        )
        act_quit.setShortcut(QtGui.QKeySequence("Ctrl+Q"))
        act_quit.setShortcutContext(QtCore.Qt.ApplicationShortcut)
        act_quit.triggered.connect(app.quit)
        self.addAction(act_quit)
        toolbar.addAction(act_quit)

        spacer_right = QtWidgets.QWidget()
        spacer_right.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Preferred)
        toolbar.addWidget(spacer_right)

        self.act_reset_visual = QtWidgets.QAction(
            style.standardIcon(QtWidgets.QStyle.SP_DialogResetButton), "Reset visuel", self
        )
        self.act_reset_visual.setToolTip("Relancer l’animation du glyphe depuis le début")
        self.act_reset_visual.setStatusTip("Relancer l’animation du glyphe depuis le début")
        self.act_reset_visual.triggered.connect(self.reset_visual_model)
        toolbar.addAction(self.act_reset_visual)

        status = QtWidgets.QStatusBar()
        status.setObjectName("StatusBar")
        status.setSizeGripEnabled(False)
        self.setStatusBar(status)

        # Onglets
        self.tabs = QtWidgets.QTabWidget()
        self.tabs.setObjectName("ControlTabs")
        self.tabs.setDocumentMode(True)

        self.tab_signature = SignatureTab()
        self.tab_settings = SettingsTab()
        for tab in [self.tab_signature, self.tab_settings]:
            tab.changed.connect(self.on_delta)

        self.tabs.addTab(self._wrap_scrollable_tab(self.tab_signature), "Signature")
        self.tabs.addTab(self._wrap_scrollable_tab(self.tab_settings), "Rendu")
        bar = self.tabs.tabBar()
        bar.setExpanding(True)
        bar.setElideMode(QtCore.Qt.ElideNone)

        shell = QtWidgets.QWidget()
        shell.setObjectName("CardContainer")
        shell_layout = QtWidgets.QVBoxLayout(shell)
        shell_layout.setContentsMargins(18, 18, 18, 18)
        shell_layout.addWidget(self.tabs, 1)
        self.setCentralWidget(shell)

        # Fenêtre en coin supérieur droit, moitié de l’écran en largeur.
        if screen is not None:
            geometry = screen.availableGeometry()
            width = max(360, geometry.width() // 3)
            height = max(400, geometry.height() // 2)
            self.resize(width, height)
            self.move(geometry.x() + geometry.width() - width, geometry.y())

        self.setWindowFlag(QtCore.Qt.WindowStaysOnTopHint, True)

    # ----------------------------------------------------------------- état
    def load_state(self, state: dict):
        """Replace the whole state (e.g. signature read from the command line)."""

        for key in ("settings", "system", "signature"):
            if isinstance(state.get(key), dict):
                self.state[key] = copy.deepcopy(state[key])
        if "signature" in state and state["signature"] is None:
            self.state["signature"] = None
        if "processing" in state:
            self.state["processing"] = bool(state["processing"])
        self.tab_settings.set_defaults(self.state.get("settings"), self.state.get("system"))
        self.tab_signature.set_defaults(self.state.get("signature"))
        with QtCore.QSignalBlocker(self.tab_signature.chk_processing):
            self.tab_signature.chk_processing.setChecked(bool(self.state.get("processing")))
        self._apply_transparency()
        self.push_params()

    def collect_state(self) -> dict:
        return dict(
            settings=self.tab_settings.collect(),
            system=self.tab_settings.collect_system(),
            signature=copy.deepcopy(self.state.get("signature")),
            processing=bool(self.state.get("processing", False)),
        )

    def reset_visual_model(self):
        """Restart the glyph animation without touching parameters."""

        message = "Animation relancée"
        view = getattr(self.view_win, "view", None)
        if view is not None and hasattr(view, "reset_visual_state"):
            view.reset_visual_state()
        else:
            message = "Aucun moteur visuel à réinitialiser"
        self.statusBar().showMessage(message, 4000)

    def _apply_transparency(self):
        setter = getattr(self.view_win, "set_transparent", None)
        if callable(setter):
            setter(bool(self.state.get("system", {}).get("transparent", False)))

    def on_delta(self, delta: dict):
        for key, value in delta.items():
            if isinstance(value, dict) and isinstance(self.state.get(key), dict):
                self.state[key].update(value)
            elif isinstance(value, dict):
                self.state[key] = copy.deepcopy(value)
            else:
                self.state[key] = value
        if "system" in delta:
            self._apply_transparency()
        self.push_params()

    def _view_payload(self) -> dict:
        payload = dict(self.state)
        if payload.get("signature") is None:
            payload.pop("signature", None)
        return payload

    def push_params(self):
        view = getattr(self.view_win, "view", None)
        if view is None:
            return
        try:
            view.set_params(self._view_payload())
        except RuntimeError as exc:
            # The view can be torn down before the control window on exit.
            log.warning("Unable to push parameters to the view: %s", exc)
            return
        if self.state.get("processing"):
            self.statusBar().showMessage("Analyse en cours…")
        else:
            self.statusBar().clearMessage()

    # ----------------------------------------------------------------- habillage
    def _apply_theme(self):
        accent_rgb = "139, 92, 246"
        parts = [
            "QMainWindow {",
            "    background-color: #15151f;",
            "    color: #f5f6ff;",
            "}",
            "QToolBar {",
            "    background: #1d1d29;",
            "    border: none;",
            "    border-bottom: 1px solid rgba(255, 255, 255, 0.08);",
            "    padding: 8px 8px;",
            "    spacing: 6px;",
            "}",
            "QToolButton {",
            "    color: #f5f6ff;",
            "    background: transparent;",
            "    border-radius: 8px;",
            "    padding: 6px 12px;",
            "}",
            "QToolButton:hover {",
            f"    background: rgba({accent_rgb}, 0.14);",
            "}",
            "QLabel, QCheckBox, QGroupBox {",
            "    color: #f5f6ff;",
            "}",
            "QGroupBox {",
            "    border: 1px solid rgba(255, 255, 255, 0.08);",
            "    border-radius: 8px;",
            "    margin-top: 12px;",
            "    padding-top: 8px;",
            "}",
            "QTabBar::tab {",
            "    color: #c7c9e0;",
            "    padding: 8px 16px;",
            "}",
            "QTabBar::tab:selected {",
            "    color: #ffffff;",
            f"    border-bottom: 2px solid rgb({accent_rgb});",
            "}",
            "QStatusBar {",
            "    color: #c7c9e0;",
            "}",
        ]
        self.setStyleSheet("\n".join(parts))

    def _wrap_scrollable_tab(self, widget: QtWidgets.QWidget) -> QtWidgets.QScrollArea:
        scroll = QtWidgets.QScrollArea()
        scroll.setWidget(widget)
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        scroll.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAsNeeded)
        scroll.setFrameShape(QtWidgets.QFrame.NoFrame)
        return scroll
