import json

import numpy as np
import pytest
import trimesh

from lasso_select.candidates import (
    CandidateEntry,
    CandidateSet,
    entries_from_array,
    entries_from_records,
    load_candidates,
)


def test_entries_from_array_uses_row_index_by_default():
    entries = entries_from_array([[0, 0, 0], [1, 2, 3]])
    assert [e.id for e in entries] == [0, 1]
    assert np.allclose(entries[1].position, (1.0, 2.0, 3.0))


def test_entries_from_array_with_ids():
    entries = entries_from_array(np.zeros((2, 3)), ids=["a", "b"])
    assert [e.id for e in entries] == ["a", "b"]
    with pytest.raises(ValueError):
        entries_from_array(np.zeros((2, 3)), ids=["a"])


def test_entries_from_records():
    entries = entries_from_records([{"x": 1, "y": 2, "z": 3, "__id": "n1"}, {"x": "4", "y": 5, "z": 6, "id": 9}])
    assert [e.id for e in entries] == ["n1", 9]
    assert np.allclose(entries[1].position, (4.0, 5.0, 6.0))


def test_malformed_record_rejected():
    with pytest.raises(ValueError, match="#0"):
        entries_from_records([{"x": 1, "y": 2, "__id": 1}])


def test_candidate_needs_3d_position():
    with pytest.raises(ValueError):
        CandidateEntry(1, (1.0, 2.0))


def test_load_candidates_from_point_cloud(tmp_path):
    path = tmp_path / "cloud.ply"
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    trimesh.PointCloud(pts).export(str(path))
    entries = load_candidates(str(path))
    assert len(entries) == 3
    assert [e.id for e in entries] == [0, 1, 2]


def test_load_candidates_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_candidates(str(tmp_path / "missing.ply"))


def test_candidate_set_notifies_subscribers():
    seen = []
    cset = CandidateSet()
    unsubscribe = cset.subscribe(lambda entries: seen.append(len(entries)))
    cset.replace(entries_from_array(np.zeros((4, 3))))
    assert seen == [4]
    assert len(cset) == 4
    assert cset.positions().shape == (4, 3)
    unsubscribe()
    cset.replace([])
    assert seen == [4]
    assert cset.positions().shape == (0, 3)


def test_load_candidates_from_json_records(tmp_path):
    path = tmp_path / "entries.json"
    path.write_text(json.dumps([{"x": 0, "y": 0, "z": -2000, "__id": "inside"}, {"x": 1, "y": 2, "z": 3, "id": 7}]))
    entries = load_candidates(str(path))
    assert [e.id for e in entries] == ["inside", 7]
    assert np.allclose(entries[0].position, (0.0, 0.0, -2000.0))


@pytest.mark.parametrize("payload", ['{"x": 1}', "[1, 2]", "not json"])
def test_load_candidates_rejects_bad_json(tmp_path, payload):
    path = tmp_path / "bad.json"
    path.write_text(payload)
    with pytest.raises(ValueError):
        load_candidates(str(path))
