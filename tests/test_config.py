from __future__ import annotations

import pytest

from anchor_testkit.config import HarnessConfig

ENV_KEYS = (
    "STRICT_ACCOUNT_NAMES",
    "ALLOW_TRAILING_BYTES",
    "LOG_FAILED_TX_LOGS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for k in ENV_KEYS:
        monkeypatch.delenv(f"ANCHOR_TESTKIT_{k}", raising=False)


def test_defaults() -> None:
    cfg = HarnessConfig.from_env()
    assert cfg == HarnessConfig()
    assert cfg.strict_account_names is False
    assert cfg.allow_trailing_bytes is True
    assert cfg.log_failed_tx_logs is True
    assert cfg.log_level == "WARNING"
    assert cfg.log_format == "text"
    assert cfg.log_file is None


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("ANCHOR_TESTKIT_STRICT_ACCOUNT_NAMES", "yes")
    monkeypatch.setenv("ANCHOR_TESTKIT_ALLOW_TRAILING_BYTES", "0")
    monkeypatch.setenv("ANCHOR_TESTKIT_LOG_FAILED_TX_LOGS", "false")
    monkeypatch.setenv("ANCHOR_TESTKIT_LOG_LEVEL", "debug")
    monkeypatch.setenv("ANCHOR_TESTKIT_LOG_FORMAT", "JSON")
    monkeypatch.setenv("ANCHOR_TESTKIT_LOG_FILE", str(tmp_path / "tk.log"))
    cfg = HarnessConfig.from_env()
    assert cfg.strict_account_names is True
    assert cfg.allow_trailing_bytes is False
    assert cfg.log_failed_tx_logs is False
    assert cfg.log_level == "DEBUG"
    assert cfg.log_format == "json"
    assert cfg.log_file == str(tmp_path / "tk.log")


def test_custom_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MYTK_STRICT_ACCOUNT_NAMES", "1")
    assert HarnessConfig.from_env(prefix="MYTK_").strict_account_names is True


@pytest.mark.parametrize("key, value", [("LOG_LEVEL", "loud"), ("LOG_FORMAT", "xml")])
def test_invalid_env_values(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(f"ANCHOR_TESTKIT_{key}", value)
    with pytest.raises(ValueError):
        HarnessConfig.from_env()


def test_with_overrides() -> None:
    base = HarnessConfig(log_level="INFO")
    cfg = HarnessConfig.with_overrides(base, strict_account_names="on", log_format="json", unknown=1)
    assert cfg.strict_account_names is True
    assert cfg.log_format == "json"
    assert cfg.log_level == "INFO"
    assert base.strict_account_names is False
    with pytest.raises(ValueError):
        HarnessConfig.with_overrides(base, log_level="chatty")


def test_to_dict() -> None:
    assert HarnessConfig().to_dict() == {
        "strict_account_names": False,
        "allow_trailing_bytes": True,
        "log_failed_tx_logs": True,
        "log_level": "WARNING",
        "log_format": "text",
        "log_file": None,
    }
