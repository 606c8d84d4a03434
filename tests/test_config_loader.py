from __future__ import annotations

from pathlib import Path

import pytest

from vierabridge.core.config_loader import default_config_path, load_config, parse_config
from vierabridge.core.errors import ConfigLoadError, ConfigValidationError, DeclarationError
from vierabridge.core.model import DeviceDeclaration
from vierabridge.core.outcome import Failure
from vierabridge.core.validation import validate


def _write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_load_config(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "config.yaml",
        """
tvs:
  - ip_address: 10.0.0.5
    mac: 11:22:33:44:55:66
    friendly_name: Living Room
  - ip_address: 10.0.0.7
    app_id: APPID
    enc_key: "c2VjcmV0"
    disabled_app_support: true
""",
    )

    loaded = load_config(path)
    assert loaded.path == path
    assert loaded.devices == (
        DeviceDeclaration(ip_address="10.0.0.5", mac="11:22:33:44:55:66", friendly_name="Living Room"),
        DeviceDeclaration(
            ip_address="10.0.0.7",
            app_id="APPID",
            enc_key="c2VjcmV0",
            disabled_app_support=True,
        ),
    )


def test_malformed_address_passes_schema(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "tvs:\n  - ip_address: tv.local\n")
    assert load_config(path).devices[0].ip_address == "tv.local"


def test_empty_file_has_no_devices(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "config.yaml", "")
    assert load_config(path).devices == ()


def test_missing_file_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "televisions: []\n",
        "tvs: 10.0.0.5\n",
        "- 10.0.0.5\n",
        "tvs: [\n",
    ],
)
def test_invalid_documents_rejected(tmp_path: Path, content: str) -> None:
    path = _write_config(tmp_path / "config.yaml", content)
    with pytest.raises(ConfigValidationError):
        load_config(path)


@pytest.mark.parametrize(
    ("content", "address", "problem"),
    [
        ("tvs:\n  - mac: AA:BB:CC:DD:EE:FF\n", "tvs.1", "'ip_address' is a required property"),
        ("tvs:\n  - ip_address: 10.0.0.5\n    color: red\n", "10.0.0.5", "'color' was unexpected"),
        ("tvs:\n  - ip_address: 10.0.0.5\n    disabled_app_support: maybe\n", "10.0.0.5", "disabled_app_support"),
        ("tvs:\n  - ip_address: 10.0.0.5\n    mac: null\n", "10.0.0.5", "mac: None is not of type 'string'"),
        ("tvs:\n  - 10.0.0.5\n", "tvs.1", "is not of type 'object'"),
    ],
)
def test_malformed_entry_is_rejected_on_its_own(tmp_path: Path, content: str, address: str, problem: str) -> None:
    path = _write_config(tmp_path / "config.yaml", "tvs:\n  - ip_address: 10.0.0.9\n" + content[len("tvs:\n"):])

    good, bad = load_config(path).devices

    assert good == DeviceDeclaration(ip_address="10.0.0.9")
    assert bad.ip_address == address
    assert any(problem in line for line in bad.problems)
    outcome = validate(bad)
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, DeclarationError)
    assert problem in outcome.message


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "config.yaml",
        "tvs:\n  - ip_address: 10.0.0.5\n    ip_address: 10.0.0.6\n",
    )
    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_schema_error_names_location() -> None:
    with pytest.raises(ConfigValidationError) as exc:
        parse_config({"tvs": [{"ip_address": "10.0.0.5"}], "extra": True})
    assert "Additional properties" in str(exc.value)

    devices = parse_config({"tvs": [{"ip_address": "10.0.0.5"}, {"ip_address": 5}]})
    assert devices[1].ip_address == "5"
    assert devices[1].problems == ("ip_address: 5 is not of type 'string'",)


def test_default_config_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("VIERABRIDGE_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    assert default_config_path() == tmp_path / "cfg" / "vierabridge" / "config.yaml"

    monkeypatch.setenv("VIERABRIDGE_CONFIG", str(tmp_path / "other.yaml"))
    assert default_config_path() == tmp_path / "other.yaml"
