from simbridge import doctor
from simbridge.config import BridgeConfig


def _all_tools_present(monkeypatch):
    monkeypatch.setattr(doctor, "_resolve", lambda exe: f"/usr/bin/{exe}")


def test_doctor_collect_checks_contains_expected_keys(monkeypatch):
    _all_tools_present(monkeypatch)

    payload = doctor.collect_checks(BridgeConfig())

    assert payload["ok"] is True
    assert payload["backend"] == "idb"
    assert set(payload["tools"]) == {"idb", "cliclick", "xcrun", "sips", "osascript", "pbcopy"}
    assert "macos_automation" not in payload


def test_doctor_reports_missing_backend_tool(monkeypatch):
    monkeypatch.setattr(doctor, "_resolve", lambda exe: "" if exe == "cliclick" else f"/usr/bin/{exe}")
    monkeypatch.setattr(doctor, "_check_osascript_permissions", lambda: {"ok": True})

    payload = doctor.collect_checks(BridgeConfig(backend="desktop"))

    assert payload["ok"] is False
    assert payload["problems"] == ["cliclick not found (cliclick)"]
    assert payload["macos_automation"]["osascript_system_events"] == {"ok": True}


def test_doctor_flags_missing_ui_scripting(monkeypatch):
    _all_tools_present(monkeypatch)
    monkeypatch.setattr(doctor, "_check_osascript_permissions", lambda: {"ok": False, "returncode": 1})

    payload = doctor.collect_checks(BridgeConfig(backend="desktop"))

    assert any("UI scripting" in p for p in payload["problems"])


def test_cliclick_is_optional_for_idb(monkeypatch):
    monkeypatch.setattr(doctor, "_resolve", lambda exe: "" if exe == "cliclick" else f"/usr/bin/{exe}")

    payload = doctor.collect_checks(BridgeConfig(backend="idb"))

    assert payload["ok"] is True
    assert payload["tools"]["cliclick"]["ok"] is False


def test_xcrun_is_only_required_for_desktop(monkeypatch):
    monkeypatch.setattr(doctor, "_resolve", lambda exe: "" if exe == "xcrun" else f"/usr/bin/{exe}")
    monkeypatch.setattr(doctor, "_check_osascript_permissions", lambda: {"ok": True})

    assert doctor.collect_checks(BridgeConfig(backend="idb"))["ok"] is True
    desktop = doctor.collect_checks(BridgeConfig(backend="desktop"))
    assert desktop["problems"] == ["xcrun not found (xcrun)"]
