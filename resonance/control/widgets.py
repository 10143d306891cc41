from PyQt5 import QtWidgets, QtCore


def mk_info(text: str) -> QtWidgets.QToolButton:
    b = QtWidgets.QToolButton(); b.setText("i"); b.setCursor(QtCore.Qt.PointingHandCursor)
    b.setToolTipDuration(0); b.setToolTip(text); b.setFixedSize(20,20)
    b.setStyleSheet("QToolButton{border:1px solid #7c6fd6;border-radius:10px;font-weight:bold;padding:0;color:#5b3fd1;background:#efeafd;}QToolButton:hover{background:#e2d9fb;}")
    return b

def mk_reset(cb) -> QtWidgets.QToolButton:
    b = QtWidgets.QToolButton(); b.setText("↺"); b.setCursor(QtCore.Qt.PointingHandCursor)
    b.setToolTip("Réinitialiser"); b.setFixedSize(22,22)
    b.setStyleSheet("QToolButton{border:1px solid #9aa5b1;border-radius:11px;padding:0;background:#f2f4f7;color:#2b2b2b;font-weight:bold;}QToolButton:hover{background:#e9edf2;}")
    b.clicked.connect(lambda checked=False, _cb=cb: _cb())
    return b

def row(form: QtWidgets.QFormLayout, label: str, widget: QtWidgets.QWidget, tip: str, reset_cb=None):
    h = QtWidgets.QHBoxLayout(); h.setContentsMargins(0,0,0,0); h.setSpacing(6)
    h.addWidget(widget, 1)
    if reset_cb: h.addWidget(mk_reset(reset_cb), 0)
    h.addWidget(mk_info(tip), 0)
    w = QtWidgets.QWidget(); w.setLayout(h)
    lbl = QtWidgets.QLabel(label)
    lbl.setObjectName("FormLabel")
    form.addRow(lbl, w)
    w._form_label = lbl  # type: ignore[attr-defined]
    widget.setProperty("resonance_form_label", label)
    return w


class FloatSlider(QtWidgets.QWidget):
    """Horizontal slider paired with a spin box over a fixed float range."""

    valueChanged = QtCore.pyqtSignal(float)

    def __init__(self, minimum: float, maximum: float, value: float = 0.0, decimals: int = 2):
        super().__init__()
        self._decimals = max(0, int(decimals))
        self._resolution = 10 ** self._decimals or 1
        self._minimum = float(minimum)
        self._maximum = float(maximum)

        self.slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.slider.setTracking(True)
        self.slider.setRange(int(round(self._minimum * self._resolution)), int(round(self._maximum * self._resolution)))

        self.spin = QtWidgets.QDoubleSpinBox()
        self.spin.setDecimals(self._decimals)
        self.spin.setSingleStep(1 / self._resolution)
        self.spin.setRange(self._minimum, self._maximum)

        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self.slider, 1)
        layout.addWidget(self.spin)

        self.slider.valueChanged.connect(self._on_slider_changed)
        self.spin.valueChanged.connect(self._on_spin_changed)

        self.setValue(value)

    def _on_slider_changed(self, raw: int):
        value = raw / self._resolution
        with QtCore.QSignalBlocker(self.spin):
            self.spin.setValue(value)
        self.valueChanged.emit(value)

    def _on_spin_changed(self, value: float):
        with QtCore.QSignalBlocker(self.slider):
            self.slider.setValue(int(round(value * self._resolution)))
        self.valueChanged.emit(float(value))

    def setValue(self, value: float):
        clamped = max(self._minimum, min(self._maximum, float(value)))
        with QtCore.QSignalBlocker(self.spin):
            self.spin.setValue(clamped)
        with QtCore.QSignalBlocker(self.slider):
            self.slider.setValue(int(round(clamped * self._resolution)))

    def value(self) -> float:
        return float(self.spin.value())
