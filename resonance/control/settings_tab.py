from PyQt5 import QtWidgets, QtCore
from .widgets import row, FloatSlider
from .config import DEFAULTS, TOOLTIPS, COLOR_MODES

COLOR_MODE_LABELS = {
    "emotional": "Émotionnel",
    "archetypal": "Archétypal",
    "energy": "Énergie",
    "monochrome": "Monochrome",
}


class SettingsTab(QtWidgets.QWidget):
    """Render settings and system options of the glyph view."""

    changed = QtCore.pyqtSignal(dict)

    def __init__(self):
        super().__init__()
        d = DEFAULTS["settings"]
        s = DEFAULTS["system"]
        outer = QtWidgets.QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(8)

        render_box = QtWidgets.QGroupBox("Rendu du glyphe")
        fl = QtWidgets.QFormLayout(render_box)
        fl.setContentsMargins(8, 8, 8, 8)
        outer.addWidget(render_box)

        self.sl_intensity = FloatSlider(0.1, 2.0, d["intensity"])
        self.sp_particles = QtWidgets.QSpinBox(); self.sp_particles.setRange(0, 200); self.sp_particles.setValue(d["particleCount"])
        self.chk_glow = QtWidgets.QCheckBox(); self.chk_glow.setChecked(d["glowEnabled"])
        self.cb_colorMode = QtWidgets.QComboBox()
        for mode in COLOR_MODES:
            self.cb_colorMode.addItem(COLOR_MODE_LABELS.get(mode, mode), mode)
        self._set_color_mode(d["colorMode"])
        self.sl_speed = FloatSlider(0.1, 3.0, d["animationSpeed"])
        self.chk_inner = QtWidgets.QCheckBox(); self.chk_inner.setChecked(d["showInnerPatterns"])

        row(fl, "Intensité", self.sl_intensity, TOOLTIPS["settings.intensity"], lambda: self._reset(self.sl_intensity, self.sl_intensity.setValue, d["intensity"]))
        row(fl, "Particules", self.sp_particles, TOOLTIPS["settings.particleCount"], lambda: self._reset(self.sp_particles, self.sp_particles.setValue, d["particleCount"]))
        row(fl, "Halo lumineux", self.chk_glow, TOOLTIPS["settings.glowEnabled"], lambda: self._reset(self.chk_glow, self.chk_glow.setChecked, d["glowEnabled"]))
        row(fl, "Mode de couleur", self.cb_colorMode, TOOLTIPS["settings.colorMode"], lambda: self._reset(self.cb_colorMode, self._set_color_mode, d["colorMode"]))
        row(fl, "Vitesse d’animation", self.sl_speed, TOOLTIPS["settings.animationSpeed"], lambda: self._reset(self.sl_speed, self.sl_speed.setValue, d["animationSpeed"]))
        row(fl, "Motifs internes", self.chk_inner, TOOLTIPS["settings.showInnerPatterns"], lambda: self._reset(self.chk_inner, self.chk_inner.setChecked, d["showInnerPatterns"]))

        system_box = QtWidgets.QGroupBox("Système")
        sfl = QtWidgets.QFormLayout(system_box)
        sfl.setContentsMargins(8, 8, 8, 8)
        outer.addWidget(system_box)

        self.sp_dpr = QtWidgets.QDoubleSpinBox(); self.sp_dpr.setRange(1.0, 4.0); self.sp_dpr.setSingleStep(0.25); self.sp_dpr.setValue(s["dprClamp"])
        self.sp_interval = QtWidgets.QSpinBox(); self.sp_interval.setRange(0, 1000); self.sp_interval.setSuffix(" ms"); self.sp_interval.setValue(s["frameIntervalMs"])
        self.chk_transparent = QtWidgets.QCheckBox(); self.chk_transparent.setChecked(s["transparent"])

        row(sfl, "Limite haute résolution", self.sp_dpr, TOOLTIPS["system.dprClamp"], lambda: self._reset(self.sp_dpr, self.sp_dpr.setValue, s["dprClamp"]))
        row(sfl, "Intervalle d’image", self.sp_interval, TOOLTIPS["system.frameIntervalMs"], lambda: self._reset(self.sp_interval, self.sp_interval.setValue, s["frameIntervalMs"]))
        row(sfl, "Fenêtre transparente", self.chk_transparent, TOOLTIPS["system.transparent"], lambda: self._reset(self.chk_transparent, self.chk_transparent.setChecked, s["transparent"]))
        outer.addStretch(1)

        for w in [self.sl_intensity, self.sp_particles, self.chk_glow, self.cb_colorMode, self.sl_speed,
                  self.chk_inner, self.sp_dpr, self.sp_interval, self.chk_transparent]:
            if isinstance(w, QtWidgets.QCheckBox): w.stateChanged.connect(self.emit_delta)
            elif isinstance(w, QtWidgets.QComboBox): w.currentIndexChanged.connect(self.emit_delta)
            else: w.valueChanged.connect(self.emit_delta)

    def _reset(self, widget, setter, value):
        # Un seul delta par remise à zéro, même si la valeur ne change pas.
        with QtCore.QSignalBlocker(widget):
            setter(value)
        self.emit_delta()

    def _set_color_mode(self, mode):
        index = self.cb_colorMode.findData(str(mode))
        with QtCore.QSignalBlocker(self.cb_colorMode):
            self.cb_colorMode.setCurrentIndex(max(0, index))

    def collect(self):
        return dict(
            intensity=self.sl_intensity.value(),
            particleCount=self.sp_particles.value(),
            glowEnabled=self.chk_glow.isChecked(),
            colorMode=self.cb_colorMode.currentData(),
            animationSpeed=self.sl_speed.value(),
            showInnerPatterns=self.chk_inner.isChecked(),
        )

    def collect_system(self):
        return dict(
            dprClamp=self.sp_dpr.value(),
            frameIntervalMs=self.sp_interval.value(),
            transparent=self.chk_transparent.isChecked(),
        )

    def set_defaults(self, cfg, system=None):
        cfg = cfg or {}
        system = system or {}
        d = DEFAULTS["settings"]
        s = DEFAULTS["system"]
        self.sl_intensity.setValue(float(cfg.get("intensity", d["intensity"])))
        self.sl_speed.setValue(float(cfg.get("animationSpeed", d["animationSpeed"])))
        self._set_color_mode(cfg.get("colorMode", d["colorMode"]))
        with QtCore.QSignalBlocker(self.sp_particles):
            self.sp_particles.setValue(int(cfg.get("particleCount", d["particleCount"])))
        with QtCore.QSignalBlocker(self.chk_glow):
            self.chk_glow.setChecked(bool(cfg.get("glowEnabled", d["glowEnabled"])))
        with QtCore.QSignalBlocker(self.chk_inner):
            self.chk_inner.setChecked(bool(cfg.get("showInnerPatterns", d["showInnerPatterns"])))
        with QtCore.QSignalBlocker(self.sp_dpr):
            self.sp_dpr.setValue(float(system.get("dprClamp", s["dprClamp"])))
        with QtCore.QSignalBlocker(self.sp_interval):
            self.sp_interval.setValue(int(system.get("frameIntervalMs", s["frameIntervalMs"])))
        with QtCore.QSignalBlocker(self.chk_transparent):
            self.chk_transparent.setChecked(bool(system.get("transparent", s["transparent"])))

    def emit_delta(self, *a):
        self.changed.emit({"settings": self.collect(), "system": self.collect_system()})
