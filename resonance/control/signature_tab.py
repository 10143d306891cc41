import logging

from PyQt5 import QtWidgets, QtCore
from .widgets import row, FloatSlider
from .config import DEFAULTS, TOOLTIPS
from ..signature import (
    describe_complexity,
    describe_energy,
    describe_valence,
    load_analysis,
)

log = logging.getLogger(__name__)

# (clé, libellé, min, max) des champs de premier niveau puis des paramètres du glyphe.
_CORE_FIELDS = [
    ("emotional_valence", "Valence émotionnelle", -1.0, 1.0),
    ("cognitive_complexity", "Complexité cognitive", 0.0, 1.0),
    ("energy_level", "Niveau d’énergie", 0.0, 1.0),
]
_GLYPH_FIELDS = [
    ("shape_complexity", "Complexité de forme", 0.0, 1.0),
    ("color_hue", "Teinte", 0.0, 1.0),
    ("animation_speed", "Vitesse propre", 0.0, 1.0),
    ("resonance_frequency", "Fréquence de résonance", 1.0, 10.0),
]


class SignatureTab(QtWidgets.QWidget):
    """Edit the signature by hand or load an analysis result from disk."""

    changed = QtCore.pyqtSignal(dict)

    def __init__(self):
        super().__init__()
        d = DEFAULTS["signature"]
        g = d["glyph_parameters"]
        outer = QtWidgets.QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(8)

        bar = QtWidgets.QHBoxLayout()
        bar.setContentsMargins(0, 0, 0, 0)
        self.btn_load = QtWidgets.QPushButton("Charger une analyse…")
        self.btn_load.setToolTip("Lit un résultat d’analyse JSON et applique sa signature.")
        self.btn_load.clicked.connect(self._on_load_clicked)
        self.chk_processing = QtWidgets.QCheckBox("Analyse en cours")
        self.chk_processing.setToolTip("Affiche l’animation d’attente à la place du glyphe.")
        self.chk_processing.toggled.connect(self._on_processing_toggled)
        bar.addWidget(self.btn_load)
        bar.addStretch(1)
        bar.addWidget(self.chk_processing)
        outer.addLayout(bar)

        self.sliders = {}
        core_box = QtWidgets.QGroupBox("Signature")
        fl = QtWidgets.QFormLayout(core_box)
        fl.setContentsMargins(8, 8, 8, 8)
        outer.addWidget(core_box)
        for key, label, lo, hi in _CORE_FIELDS:
            self._add_slider(fl, key, label, lo, hi, d[key])

        glyph_box = QtWidgets.QGroupBox("Paramètres du glyphe")
        gfl = QtWidgets.QFormLayout(glyph_box)
        gfl.setContentsMargins(8, 8, 8, 8)
        outer.addWidget(glyph_box)
        for key, label, lo, hi in _GLYPH_FIELDS:
            self._add_slider(gfl, key, label, lo, hi, g[key])

        info_box = QtWidgets.QGroupBox("Lecture")
        ifl = QtWidgets.QFormLayout(info_box)
        ifl.setContentsMargins(8, 8, 8, 8)
        outer.addWidget(info_box)
        self.lbl_valence = QtWidgets.QLabel()
        self.lbl_complexity = QtWidgets.QLabel()
        self.lbl_energy = QtWidgets.QLabel()
        self.lbl_archetype = QtWidgets.QLabel("—")
        self.lbl_meaning = QtWidgets.QLabel("—"); self.lbl_meaning.setWordWrap(True)
        ifl.addRow("Valence", self.lbl_valence)
        ifl.addRow("Complexité", self.lbl_complexity)
        ifl.addRow("Énergie", self.lbl_energy)
        ifl.addRow("Archétype", self.lbl_archetype)
        ifl.addRow("Sens", self.lbl_meaning)
        outer.addStretch(1)

        self._update_labels()

    def _add_slider(self, form, key, label, lo, hi, default):
        slider = FloatSlider(lo, hi, default)
        slider.valueChanged.connect(self.emit_delta)
        row(form, label, slider, TOOLTIPS[f"signature.{key}"], lambda: slider.setValue(default) or self.emit_delta())
        self.sliders[key] = slider

    def collect(self):
        return dict(
            emotional_valence=self.sliders["emotional_valence"].value(),
            cognitive_complexity=self.sliders["cognitive_complexity"].value(),
            energy_level=self.sliders["energy_level"].value(),
            glyph_parameters={key: self.sliders[key].value() for key, *_ in _GLYPH_FIELDS},
        )

    def set_defaults(self, cfg):
        cfg = cfg or {}
        d = DEFAULTS["signature"]
        glyph = cfg.get("glyph_parameters") or {}
        for key, *_ in _CORE_FIELDS:
            self.sliders[key].setValue(float(cfg.get(key, d[key])))
        for key, *_ in _GLYPH_FIELDS:
            self.sliders[key].setValue(float(glyph.get(key, d["glyph_parameters"][key])))
        self._update_labels()

    def apply_analysis(self, result):
        """Show ``result`` (an :class:`AnalysisResult`) and emit its signature."""

        self.set_defaults(result.signature.as_dict())
        self.lbl_archetype.setText(result.archetypal_resonance or "—")
        self.lbl_meaning.setText(result.meaning_signature or "—")
        with QtCore.QSignalBlocker(self.chk_processing):
            self.chk_processing.setChecked(False)
        self.changed.emit({"signature": self.collect(), "processing": False})

    def _update_labels(self):
        values = self.collect()
        self.lbl_valence.setText(describe_valence(values["emotional_valence"]))
        self.lbl_complexity.setText(describe_complexity(values["cognitive_complexity"]))
        self.lbl_energy.setText(describe_energy(values["energy_level"]))

    def _on_load_clicked(self):
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Charger une analyse", "", "JSON (*.json)")
        if not path:
            return
        try:
            result = load_analysis(path)
        except (OSError, ValueError) as exc:
            log.error("Unable to load analysis %s: %s", path, exc)
            QtWidgets.QMessageBox.warning(self, "Erreur", f"Lecture impossible : {exc}")
            return
        self.apply_analysis(result)

    def _on_processing_toggled(self, checked: bool):
        self.changed.emit({"processing": bool(checked)})

    def emit_delta(self, *a):
        self._update_labels()
        self.changed.emit({"signature": self.collect()})
