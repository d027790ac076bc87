from pathlib import Path

import pytest

from ridgewatch.core.config import settings as cfg


def test_defaults():
    s = cfg.MonitorSettings()
    assert s.warning_threshold_ms == 120_000
    assert s.bucket_ms == 60_000
    assert s.retention == 60
    assert s.notice_ttl_ms == 2_500


def test_load_settings_reads_updated_file(tmp_path: Path, monkeypatch):
    conf_path = tmp_path / "config.yml"
    conf_path.write_text("warning_threshold_s: 30\nretention: 10\n", encoding="utf-8")
    monkeypatch.setenv("RW_CONFIG", str(conf_path))

    first = cfg.load_settings()
    assert first.warning_threshold_ms == 30_000
    assert first.retention == 10

    conf_path.write_text("warning_threshold_s: 45\nretention: 20\n", encoding="utf-8")

    second = cfg.load_settings()
    assert second.warning_threshold_ms == 45_000
    assert second.retention == 20


def test_env_overrides_yaml(tmp_path: Path, monkeypatch):
    conf_path = tmp_path / "config.yml"
    conf_path.write_text("tick_interval_s: 5\nretention: 10\n", encoding="utf-8")
    monkeypatch.setenv("RW_CONFIG", str(conf_path))
    monkeypatch.setenv("RW_RETENTION", "30")

    s = cfg.load_settings()
    assert s.tick_interval_s == 5.0
    assert s.retention == 30


def test_missing_config_file_uses_defaults(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("RW_CONFIG", str(tmp_path / "absent.yml"))
    assert cfg.load_settings().tick_interval_s == 1.0


def test_validation():
    with pytest.raises(ValueError):
        cfg.MonitorSettings(tick_interval_s=0)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(notice_ttl_s=-1)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(warning_threshold_s=-1)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(jitter_step=-0.1)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(bucket_s=0)
    with pytest.raises(ValueError):
        cfg.MonitorSettings(retention=0)
    assert cfg.MonitorSettings(jitter_interval_s=0).jitter_interval_s == 0.0


def test_validate_assignment():
    s = cfg.MonitorSettings()
    with pytest.raises(ValueError):
        s.retention = 0


def test_settings_to_dict_roundtrips():
    s = cfg.MonitorSettings(seed=7)
    data = cfg.settings_to_dict(s)
    assert data["seed"] == 7
    assert cfg.settings_to_dict(cfg.MonitorSettings(**data)) == data
