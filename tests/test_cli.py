import pytest

from mdengine.cli import main

MDE_VARIABLES = [
    "MDE_ENV",
    "MDE_STORAGE_BACKEND",
    "MDE_DISCOVERY_ENABLED",
    "MDE_WEBSOCKET_URL",
    "MDE_PING_INTERVAL",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in MDE_VARIABLES:
        monkeypatch.delenv(name, raising=False)


def test_without_token_or_discovery_prints_usage(capsys):
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "Usage" in err
    assert "MDE_DISCOVERY_ENABLED=true" in err


def test_parquet_backend_is_rejected(monkeypatch, capsys):
    monkeypatch.setenv("MDE_STORAGE_BACKEND", "parquet")
    assert main(["6581861"]) == 1
    assert "Parquet backend" in capsys.readouterr().err


def test_s3_backend_is_rejected(monkeypatch, capsys):
    monkeypatch.setenv("MDE_STORAGE_BACKEND", "s3")
    assert main(["6581861"]) == 1
    assert "S3 backend" in capsys.readouterr().err


def test_production_preset_passes_usage_check_but_needs_parquet(monkeypatch, capsys):
    monkeypatch.setenv("MDE_ENV", "production")
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "Usage" not in err
    assert "Parquet backend" in err