# tests/test_configuration.py

import json

import pytest

from repo_archive import open_cache
from repo_archive.configuration import CacheSettings, load_settings
from repo_archive.stores import SQLiteArchiveStore


def test_defaults():
    settings = CacheSettings()
    assert settings.max_archives == 10
    assert settings.max_age_hours == 24.0
    assert settings.extreme_threshold_bytes == 100 * 1024
    assert settings.lossy_preprocess is False
    assert settings.backend == "memory"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_archives": 0},
        {"max_age_hours": 0},
        {"standard_level": 10},
        {"backend": "indexeddb"},
        {"backend": "redis"},
        {"extreme_threshold_bytes": -1},
    ],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        CacheSettings(**kwargs)


def test_load_yaml_section(tmp_path):
    path = tmp_path / "cache.yaml"
    path.write_text(
        "archive_cache:\n"
        "  max_archives: 3\n"
        "  max_age_hours: 6\n"
        "  backend: sqlite\n"
        f"  sqlite_path: {tmp_path / 'db.sqlite'}\n"
        "  unknown_key: ignored\n"
    )

    settings = load_settings(str(path))

    assert settings.max_archives == 3
    assert settings.max_age_hours == 6
    assert settings.backend == "sqlite"


def test_load_json_document(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps({"max_archives": 5, "verify_writes": False}))

    settings = load_settings(str(path))

    assert settings.max_archives == 5
    assert settings.verify_writes is False


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"))


def test_open_cache_uses_backend(tmp_path):
    settings = CacheSettings(backend="sqlite", sqlite_path=str(tmp_path / "c.db"), max_archives=4)
    cache = open_cache(settings)

    assert isinstance(cache.store, SQLiteArchiveStore)
    assert cache.settings.max_archives == 4
    assert cache.compressor.extreme_threshold_bytes == 100 * 1024
