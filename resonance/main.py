# -*- coding: utf-8 -*-
"""Entry point: glyph preview window, control window and offscreen snapshots."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, NoReturn, Optional, Sequence, Tuple


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Impossible de lancer Resonance : l'import de PyQt5 a échoué.",
        "Vérifiez que PyQt5 est installé et que les bibliothèques OpenGL requises sont disponibles.",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Indice : la bibliothèque système libGL.so.1 est manquante. Installez les paquets Mesa/OpenGL appropriés."
        )
    message_lines.append(f"Erreur d'origine : {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtWidgets, QtGui
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - dépendances environnementales
    _handle_qt_import_error(exc)

from .control.control_window import ControlWindow
from .errors import SurfaceUnavailable
from .settings import RenderSettings
from .signature import Signature, load_analysis, validate
from .view.view_widget import GlyphViewWidget, ImageSurface
from .view.runtime import attach, detach

log = logging.getLogger(__name__)

LOG_FORMAT = "[Resonance][%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def _parse_size(text: str) -> Tuple[int, int]:
    try:
        w, h = (int(part) for part in text.lower().split("x", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"taille invalide {text!r}, attendu LxH (ex. 400x400)") from None
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError(f"taille invalide {text!r}")
    return w, h


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resonance-glyph",
        description="Prévisualise le glyphe animé d'une signature cognitive et émotionnelle.",
    )
    parser.add_argument("--signature", metavar="PATH", help="résultat d'analyse JSON à afficher")
    parser.add_argument("--processing", action="store_true", help="démarre en mode « analyse en cours »")
    parser.add_argument("--snapshot", metavar="PATH", help="rend hors écran et enregistre une image, sans fenêtre")
    parser.add_argument("--frames", type=int, default=60, help="nombre d'images à simuler avant la capture (défaut 60)")
    parser.add_argument("--size", type=_parse_size, default=(400, 400), metavar="LxH", help="taille de la capture (défaut 400x400)")
    parser.add_argument("--backend", choices=("raster", "opengl"), help="force le moteur de rendu de la fenêtre")
    parser.add_argument("--no-control", action="store_true", help="n'ouvre pas la fenêtre de contrôle")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("RESONANCE_LOG_LEVEL", "INFO"),
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        type=str.upper,
        help="niveau de journalisation (défaut : RESONANCE_LOG_LEVEL ou INFO)",
    )
    return parser


class _SnapshotScheduler:
    """Frame scheduler driven by hand: each :meth:`run_once` fires the pending frame."""

    def __init__(self) -> None:
        self._callback: Optional[Callable[[], None]] = None
        self._token = 0

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._token += 1
        self._callback = callback
        return self._token

    def cancel_frame(self, token: object) -> None:
        if token == self._token:
            self._callback = None

    def run_once(self) -> bool:
        callback, self._callback = self._callback, None
        if callback is None:
            return False
        callback()
        return True


def render_snapshot(
    path: str,
    signature: Optional[Signature],
    *,
    processing: bool = False,
    frames: int = 60,
    size: Tuple[int, int] = (400, 400),
    settings: Optional[RenderSettings] = None,
) -> bool:
    """Run ``frames`` animation frames on an offscreen image and save it."""

    if QtGui.QGuiApplication.instance() is None:
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        # Kept on the function so the application outlives this call.
        render_snapshot._app = QtGui.QGuiApplication(sys.argv[:1])  # type: ignore[attr-defined]

    surface = ImageSurface(*size)
    scheduler = _SnapshotScheduler()
    handle = attach(surface, scheduler, settings)
    handle.update_signature(signature)
    handle.set_processing(processing)
    for _ in range(max(1, int(frames))):
        if not scheduler.run_once():
            break
    detach(handle)
    ok = surface.save(path)
    if ok:
        log.info("Snapshot written to %s (t=%.2f, %d frames)", path, handle.t, handle.frames_presented)
    else:
        log.error("Unable to write snapshot to %s", path)
    return ok


class ViewWindow(QtWidgets.QMainWindow):
    def __init__(self, screen: Optional[QtGui.QScreen], force_backend: Optional[str] = None):
        super().__init__(None)
        self.setWindowTitle("Resonance — Glyphe")
        self._target_screen = screen
        self.view = GlyphViewWidget(self, force_backend=force_backend)

        w = QtWidgets.QWidget()
        w.setAttribute(Qt.WA_NoSystemBackground, True)
        w.setAutoFillBackground(False)
        lay = QtWidgets.QVBoxLayout(w)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.view)
        self.setCentralWidget(w)

        if screen is not None:
            self._apply_screen_geometry(screen)
        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)
        self._transparent = False

    def _apply_screen_geometry(self, screen: QtGui.QScreen):
        geometry = screen.availableGeometry()
        side = int(min(geometry.width(), geometry.height()) * 0.6)
        left = geometry.left() + (geometry.width() - side) // 2
        top = geometry.top() + (geometry.height() - side) // 2
        self.setGeometry(left, top, side, side)

    def set_transparent(self, enabled: bool):
        enabled = bool(enabled)
        if self._transparent == enabled:
            return
        self._transparent = enabled
        bg_style = "background: transparent;" if enabled else ""
        self.setAttribute(Qt.WA_NoSystemBackground, enabled)
        self.setAttribute(Qt.WA_TranslucentBackground, enabled)
        self.setStyleSheet(bg_style)
        central = self.centralWidget()
        if central is not None:
            central.setAutoFillBackground(not enabled)
            central.setAttribute(Qt.WA_TranslucentBackground, enabled)
            central.setStyleSheet(bg_style)
        self.view.set_transparent(enabled)
        self.update()

    def reset_visual_state(self) -> None:
        self.view.reset_visual_state()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.detach()
        super().closeEvent(event)


def _initial_state(args) -> Optional[dict]:
    state: dict = {"processing": bool(args.processing)}
    if args.signature:
        try:
            result = load_analysis(args.signature)
        except (OSError, ValueError) as exc:
            log.error("Unable to read analysis %s: %s", args.signature, exc)
            return None
        log.info("Loaded analysis %s (%s)", result.id or Path(args.signature).name, result.archetypal_resonance or "-")
        state["signature"] = result.signature.as_dict()
    return state


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the application and return the exit code."""

    args = build_parser().parse_args(list(argv) if argv is not None else None)
    configure_logging(args.log_level)

    state = _initial_state(args)
    if state is None:
        return 2

    if args.snapshot:
        signature = validate(state["signature"]) if "signature" in state else None
        try:
            ok = render_snapshot(
                args.snapshot,
                signature,
                processing=state["processing"],
                frames=args.frames,
                size=args.size,
            )
        except SurfaceUnavailable as exc:
            log.error("Snapshot surface unavailable: %s", exc)
            return 1
        return 0 if ok else 1

    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv[:1])
    primary = QtGui.QGuiApplication.primaryScreen()

    view_win = ViewWindow(primary, force_backend=args.backend)
    log.info("Glyph view using %s backend", getattr(view_win.view, "backend_name", "?"))
    control_win: Optional[ControlWindow] = None
    if args.no_control:
        view_win.view.set_params(state)
    else:
        control_win = ControlWindow(app, primary, view_win)
        control_win.load_state(state)
        control_win.show()
    view_win.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
