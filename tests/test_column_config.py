from tasktrack_app.core import column_config
from tasktrack_app.core.column_config import get_columns, load_column_sets


def test_column_sets_load():
    sets = load_column_sets()
    assert "task_list" in sets and "core" in sets
    assert get_columns("task_list")[0] == "Issue"
    assert get_columns("missing") == []


def test_column_sets_fallback(tmp_path, monkeypatch):
    monkeypatch.setattr(column_config, "_CACHE", None)
    (tmp_path / "columns.yaml").write_text("sets:\n  task_list: [description]\n")
    sets = load_column_sets(tmp_path)
    assert sets["task_list"] == ["description"]
    assert "estimated_hours" in sets["time_analytics"]


def test_column_sets_invalid_yaml(tmp_path, monkeypatch):
    monkeypatch.setattr(column_config, "_CACHE", None)
    (tmp_path / "columns.yaml").write_text("sets: [unclosed\n")
    sets = load_column_sets(tmp_path)
    assert "project_progress" in sets
