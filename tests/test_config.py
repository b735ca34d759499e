import json

from place_validator import config


def test_load_validator_config_missing_file(tmp_path):
    assert config.load_validator_config(str(tmp_path / "absent.json")) is False


def test_load_validator_config_overrides(tmp_path, monkeypatch):
    for name in ("DEFAULT_TYPE_BLACKLIST", "CACHE_MAX_ENTRIES", "CACHE_MAX_AGE_MS", "HTTP_TIMEOUT_SECONDS", "STORE_DB_PATH"):
        monkeypatch.setattr(config, name, getattr(config, name))

    path = tmp_path / "validator_config.json"
    path.write_text(
        json.dumps(
            {
                "default_type_blacklist": ["ATM ", "", "parking"],
                "cache": {"max_entries": 3, "max_age_minutes": 5},
                "http_timeout_seconds": 7,
                "store_db_path": "custom.db",
            }
        ),
        encoding="utf-8",
    )

    assert config.load_validator_config(str(path)) is True
    assert config.DEFAULT_TYPE_BLACKLIST == ["atm", "parking"]
    assert config.CACHE_MAX_ENTRIES == 3
    assert config.CACHE_MAX_AGE_MS == 300_000
    assert config.HTTP_TIMEOUT_SECONDS == 7.0
    assert config.STORE_DB_PATH == "custom.db"
