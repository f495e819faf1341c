from inventory_history.data.backends.csv_source import CsvInventorySource
from inventory_history.data.backends.file_store import FileKeyValueStore
from inventory_history.history.change_detector import fingerprint
from inventory_history.history.store import HistoryStore
from inventory_history.seed_data import main


def run(tmp_path, name, *extra):
    return main([
        "--days", "7",
        "--products", "12",
        "--seed", "7",
        "--outdir", str(tmp_path / name / "data"),
        "--history-dir", str(tmp_path / name / "history"),
        *extra,
    ])


def test_seed_writes_history_and_export(tmp_path, capsys):
    assert run(tmp_path, "a") == 0
    assert "snapshots accepted" in capsys.readouterr().out

    state = HistoryStore(FileKeyValueStore(tmp_path / "a" / "history")).load()
    assert 1 <= len(state.snapshots) <= 7
    assert len(state.update_events) == min(len(state.snapshots), 10)
    assert [s.taken_at for s in state.snapshots] == sorted(s.taken_at for s in state.snapshots)

    records = CsvInventorySource(tmp_path / "a" / "data" / "liveinventory.csv").read()
    assert len(records) == 12
    # The export is the last seeded day
    assert fingerprint(records) == state.last_fingerprint


def test_seed_is_reproducible(tmp_path):
    assert run(tmp_path, "a") == 0
    assert run(tmp_path, "b") == 0
    a = HistoryStore(FileKeyValueStore(tmp_path / "a" / "history")).load()
    b = HistoryStore(FileKeyValueStore(tmp_path / "b" / "history")).load()
    assert a.last_fingerprint == b.last_fingerprint


def test_seed_refuses_existing_history(tmp_path):
    assert run(tmp_path, "a") == 0
    assert run(tmp_path, "a") == 2


def test_seed_rejects_bad_sizes(tmp_path):
    assert main(["--days", "0", "--history-dir", str(tmp_path / "h")]) == 2
