"""Tests for reading and writing the feature CSV."""

import pandas as pd
import pytest

from config.settings import get_settings
from models.matchmaker import FeatureDataset, FeatureRecord
from utils.data_loader import get_dataset, load_features, save_features
from utils.errors import LoadError


class TestLoadFeatures:

    def test_basic_file(self, write_csv):
        path = write_csv("pic.0001.jpg,0.5,0.25,0.25\npic.0002.jpg,0,1,0\n")
        ds = load_features(path)
        assert ds.names == ["pic.0001.jpg", "pic.0002.jpg"]
        assert ds[0].vector.tolist() == [0.5, 0.25, 0.25]
        assert ds[1].vector.tolist() == [0.0, 1.0, 0.0]

    def test_row_order_preserved(self, write_csv):
        path = write_csv("z,1\na,2\nm,3\n")
        assert load_features(path).names == ["z", "a", "m"]

    def test_numeric_looking_names_kept_verbatim(self, write_csv):
        path = write_csv("001,1.0\n2.50,2.0\n")
        assert load_features(path).names == ["001", "2.50"]

    def test_spaces_after_commas(self, write_csv):
        path = write_csv("a.jpg, 1.5, 2.5\nb.jpg, 3.5, 4.5\n")
        assert load_features(path)[1].vector.tolist() == [3.5, 4.5]

    def test_trailing_comma(self, write_csv):
        path = write_csv("a.jpg,1,2,\nb.jpg,3,4,\n")
        ds = load_features(path)
        assert ds.dimensions == {2}

    def test_blank_lines_skipped(self, write_csv):
        path = write_csv("a.jpg,1,2\n\nb.jpg,3,4\n")
        assert len(load_features(path)) == 2

    def test_scientific_notation(self, write_csv):
        path = write_csv("a.jpg,1e-3,2.5E2\n")
        assert load_features(path)[0].vector.tolist() == [0.001, 250.0]

    def test_accepts_str_path(self, write_csv):
        path = write_csv("a.jpg,1\n")
        assert len(load_features(str(path))) == 1


class TestLoadErrors:

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError, match="not found") as exc_info:
            load_features(tmp_path / "nope.csv")
        assert exc_info.value.path == tmp_path / "nope.csv"

    def test_directory_instead_of_file(self, tmp_path):
        with pytest.raises(LoadError, match="not found"):
            load_features(tmp_path)

    def test_empty_file(self, write_csv):
        with pytest.raises(LoadError, match="empty"):
            load_features(write_csv(""))

    def test_names_only(self, write_csv):
        with pytest.raises(LoadError, match="no value columns"):
            load_features(write_csv("a.jpg\nb.jpg\n"))

    def test_non_numeric_value(self, write_csv):
        with pytest.raises(LoadError, match="non-numeric") as exc_info:
            load_features(write_csv("a.jpg,1,2\nb.jpg,x,4\n"))
        assert exc_info.value.row == 2

    def test_short_row(self, write_csv):
        with pytest.raises(LoadError, match="missing") as exc_info:
            load_features(write_csv("a.jpg,1,2,3\nb.jpg,1,2\nc.jpg,1,2,3\n"))
        assert exc_info.value.row == 2

    def test_long_row(self, write_csv):
        with pytest.raises(LoadError, match="parse"):
            load_features(write_csv("a.jpg,1,2\nb.jpg,1,2,3,4\n"))

    def test_blank_name(self, write_csv):
        with pytest.raises(LoadError, match="no record name") as exc_info:
            load_features(write_csv("a.jpg,1\n,2\n"))
        assert exc_info.value.row == 2

    def test_nan_literal_rejected(self, write_csv):
        with pytest.raises(LoadError):
            load_features(write_csv("a.jpg,nan,1\n"))

    def test_infinite_value_rejected(self, write_csv):
        with pytest.raises(LoadError, match="non-finite"):
            load_features(write_csv("a.jpg,1\nb.jpg,inf\n"))

    def test_message_names_file_and_row(self, write_csv):
        path = write_csv("a.jpg,1\nb.jpg,oops\n")
        with pytest.raises(LoadError) as exc_info:
            load_features(path)
        assert str(path) in str(exc_info.value)
        assert "row 2" in str(exc_info.value)

    def test_io_failure_is_load_error(self, write_csv, monkeypatch):
        path = write_csv("a.jpg,1\n")

        def failing_read(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(pd, "read_csv", failing_read)
        with pytest.raises(LoadError, match="Cannot read feature file") as exc_info:
            load_features(path)
        assert exc_info.value.path == path


class TestSaveFeatures:

    def test_written_file_loads_back(self, tmp_path):
        path = tmp_path / "out" / "features.csv"
        written = save_features(path, [("a.jpg", [0.1, 0.2]), ("b.jpg", [0.3, 0.4])])
        assert written == 2
        ds = load_features(path)
        assert ds.names == ["a.jpg", "b.jpg"]
        assert ds[0].vector.tolist() == [0.1, 0.2]

    def test_append(self, tmp_path):
        path = tmp_path / "features.csv"
        save_features(path, [FeatureRecord("a.jpg", [1.0, 2.0])])
        save_features(path, [FeatureRecord("b.jpg", [3.0, 4.0])], append=True)
        assert load_features(path).names == ["a.jpg", "b.jpg"]

    def test_overwrite(self, tmp_path):
        path = tmp_path / "features.csv"
        save_features(path, [("a.jpg", [1.0])])
        save_features(path, [("b.jpg", [2.0])])
        assert load_features(path).names == ["b.jpg"]

    def test_dataset_records(self, tmp_path, ssd_dataset):
        path = tmp_path / "features.csv"
        save_features(path, ssd_dataset)
        assert load_features(path).names == ssd_dataset.names

    def test_nothing_to_write(self, tmp_path):
        path = tmp_path / "features.csv"
        assert save_features(path, []) == 0
        assert not path.exists()

    def test_ragged_records(self, tmp_path):
        with pytest.raises(ValueError, match="same vector length"):
            save_features(tmp_path / "f.csv", [("a", [1.0]), ("b", [1.0, 2.0])])


class TestGetDataset:

    def test_reads_configured_file_once(self, write_csv, monkeypatch):
        path = write_csv("a.jpg,1\nb.jpg,2\n")
        monkeypatch.setenv("FEATURE_FILE", str(path))
        get_settings.cache_clear()
        get_dataset.cache_clear()
        try:
            first = get_dataset()
            assert isinstance(first, FeatureDataset)
            assert first.names == ["a.jpg", "b.jpg"]
            assert get_dataset() is first
        finally:
            get_dataset.cache_clear()
