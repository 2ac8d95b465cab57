"""
Model stores: JSON file layout, feedback cap and error surfacing.
"""

import json

import pytest

from securecrypt import storage
from securecrypt.errors import StorageError
from securecrypt.features import extract
from securecrypt.storage import InMemoryStore, JsonFileStore, Model, TrainingExample


def sample(i=0):
    return TrainingExample(f"text {i}", "Base64", "Base64", 0.9, extract(f"text {i}"), True)


def test_missing_files_mean_empty_store(tmp_path):
    store = JsonFileStore(tmp_path / "nested" / "model.json")
    assert store.load_model() is None
    assert store.load_feedback() == []


def test_model_round_trip(tmp_path):
    store = JsonFileStore(tmp_path / "model.json")
    model = Model(weights={"Base64": {"length": 0.25}}, training_count=3, accuracy=0.5)
    store.save_model(model)
    loaded = store.load_model()
    assert loaded == model, f"Reloaded {loaded}"
    on_disk = json.loads((tmp_path / "model.json").read_text())
    assert on_disk["training_count"] == 3


def test_feedback_sits_next_to_model(tmp_path):
    store = JsonFileStore(tmp_path / "model.json")
    ex = sample()
    store.append_feedback(ex)
    assert (tmp_path / "model.feedback.json").exists()
    assert store.load_feedback() == [ex]


def test_feedback_is_capped_oldest_first(tmp_path):
    store = JsonFileStore(tmp_path / "model.json", feedback_limit=2)
    for i in range(4):
        store.append_feedback(sample(i))
    assert [e.input_text for e in store.load_feedback()] == ["text 2", "text 3"]

    mem = InMemoryStore(feedback_limit=2)
    for i in range(4):
        mem.append_feedback(sample(i))
    assert [e.input_text for e in mem.load_feedback()] == ["text 2", "text 3"]


def test_corrupt_files_raise_storage_error(tmp_path):
    path = tmp_path / "model.json"
    path.write_text("{not json")
    with pytest.raises(StorageError):
        JsonFileStore(path).load_model()
    (tmp_path / "model.feedback.json").write_text('[{"input_text": "x"}]')
    with pytest.raises(StorageError):
        JsonFileStore(path).load_feedback()


def test_clear_removes_both_files(tmp_path):
    store = JsonFileStore(tmp_path / "model.json")
    store.save_model(Model())
    store.append_feedback(sample())
    store.clear()
    assert not (tmp_path / "model.json").exists()
    assert not (tmp_path / "model.feedback.json").exists()
    store.clear()


def test_in_memory_store_copies_state():
    mem = InMemoryStore()
    model = Model(weights={"A": {"length": 1.0}})
    mem.save_model(model)
    model.weights["A"]["length"] = 5.0
    assert mem.load_model().weights["A"]["length"] == 1.0


def test_failed_write_leaves_no_temp_file(tmp_path, monkeypatch):
    store = JsonFileStore(tmp_path / "model.json")

    def refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(storage.os, "replace", refuse)
    with pytest.raises(StorageError):
        store.save_model(Model())
    leftovers = list(tmp_path.glob("*.tmp"))
    assert leftovers == [], f"Temp files left behind: {leftovers}"
    assert not (tmp_path / "model.json").exists()
