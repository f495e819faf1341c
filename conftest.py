import pytest

from inventory_history.config import set_config_for_test


@pytest.fixture(autouse=True)
def test_config(tmp_path, monkeypatch):
    """Isolate every test from the developer's .env and on-disk history."""
    for var in ["APP_ENV", "LOG_LEVEL", "LOG_FILE", "DATA_DIR", "HISTORY_DIR", "KV_BACKEND",
                "MAX_SNAPSHOTS", "MAX_EVENTS", "POLL_INTERVAL_SECONDS", "DEFAULT_CATEGORY"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(
        _env_file=None,
        app_env="test",
        log_level="DEBUG",
        data_dir=str(tmp_path / "sample_data"),
        history_dir=str(tmp_path / "history_data"),
        kv_backend="memory",
    )
    yield
    set_config_for_test(_env_file=None)
