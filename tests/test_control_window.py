"""Control window wiring: tab edits reach the glyph view."""

import pytest
from PyQt5 import QtWidgets

from resonance.control.config import DEFAULTS
from resonance.control.control_window import ControlWindow
from resonance.control.settings_tab import SettingsTab
from resonance.main import ViewWindow
from resonance.view.state import RenderMode


@pytest.fixture
def windows(qapp):
    view_win = ViewWindow(None, force_backend="raster")
    control = ControlWindow(qapp, None, view_win)
    yield view_win, control
    control.close()
    view_win.close()
    control.deleteLater()
    view_win.deleteLater()


def test_load_state_pushes_signature(windows, reference_payload):
    view_win, control = windows
    control.load_state({"signature": reference_payload, "processing": False})
    engine = view_win.view.engine
    assert engine.mode is RenderMode.ACTIVE
    assert engine.signature.cognitive_complexity == 0.9
    assert control.tab_signature.sliders["energy_level"].value() == pytest.approx(0.6)
    assert control.tab_signature.lbl_valence.text() == "Highly Positive"


def test_settings_tab_edits_reach_the_view(windows):
    view_win, control = windows
    control.tab_settings.sp_particles.setValue(33)
    control.tab_settings.cb_colorMode.setCurrentIndex(control.tab_settings.cb_colorMode.findData("monochrome"))
    settings = view_win.view.settings
    assert settings.particle_count == 33
    assert settings.color_mode.value == "monochrome"
    assert control.state["settings"]["particleCount"] == 33


def test_signature_tab_edits_reach_the_view(windows):
    view_win, control = windows
    control.tab_signature.sliders["energy_level"].spin.setValue(0.9)
    assert view_win.view.engine.signature.energy_level == pytest.approx(0.9)
    assert control.tab_signature.lbl_energy.text() == "High Energy"


def test_processing_toggle(windows):
    view_win, control = windows
    control.tab_signature.chk_processing.setChecked(True)
    assert view_win.view.engine.mode is RenderMode.PROCESSING
    control.tab_signature.chk_processing.setChecked(False)
    assert view_win.view.engine.mode is not RenderMode.PROCESSING


def test_transparency_follows_system_tab(windows):
    view_win, control = windows
    control.tab_settings.chk_transparent.setChecked(True)
    assert view_win._transparent is True
    assert view_win.view._transparent is True


def test_reset_visual_restarts_clock(windows):
    view_win, control = windows
    view_win.view.engine.step(10, 10)
    control.reset_visual_model()
    assert view_win.view.engine.t == 0.0


def test_startup_without_signature_stays_idle(windows):
    from resonance.main import _initial_state, build_parser

    view_win, control = windows
    control.load_state(_initial_state(build_parser().parse_args([])))
    engine = view_win.view.engine
    assert engine.mode is RenderMode.IDLE
    assert engine.signature is None
    assert control.state["signature"] is None
    assert control.collect_state()["signature"] is None


def test_first_signature_edit_leaves_idle(windows):
    view_win, control = windows
    control.load_state({"processing": False})
    assert view_win.view.engine.mode is RenderMode.IDLE
    control.tab_signature.sliders["cognitive_complexity"].spin.setValue(0.8)
    assert view_win.view.engine.mode is RenderMode.ACTIVE
    assert control.state["signature"]["cognitive_complexity"] == pytest.approx(0.8)
    assert control.state["signature"]["glyph_parameters"]["color_hue"] == pytest.approx(0.75)


def _reset_button(widget):
    buttons = widget.parentWidget().findChildren(QtWidgets.QToolButton)
    return next(b for b in buttons if b.text() == "↺")


class TestSettingsReset:
    @pytest.fixture
    def tab(self, qapp):
        tab = SettingsTab()
        yield tab
        tab.deleteLater()

    def test_every_reset_emits_exactly_once(self, tab):
        deltas = []
        tab.changed.connect(deltas.append)
        for widget in (tab.sl_intensity, tab.sp_particles, tab.chk_glow, tab.cb_colorMode,
                       tab.sl_speed, tab.chk_inner, tab.sp_dpr, tab.sp_interval, tab.chk_transparent):
            before = len(deltas)
            _reset_button(widget).click()
            assert len(deltas) == before + 1

    def test_reset_restores_default_once(self, tab):
        deltas = []
        tab.sp_particles.setValue(50)
        tab.changed.connect(deltas.append)
        _reset_button(tab.sp_particles).click()
        assert len(deltas) == 1
        assert deltas[0]["settings"]["particleCount"] == DEFAULTS["settings"]["particleCount"]
