"""
Tests for ExportConfig.

Test Coverage:
- Defaults and normalisation
- Validation errors
- Dictionary and JSON file loading
"""

import json

import pytest

from pixert.config import ExportConfig, load_config


class TestExportConfig:
    def test_defaults(self):
        config = ExportConfig()

        assert config.collection_name == "Pixert"
        assert config.output_format == "JPEG"
        assert config.quality == 95
        assert config.copy_on_create is False
        assert config.progress_bands == (50.0, 90.0)
        assert config.file_extension == ".jpg"

    def test_format_is_normalised(self):
        config = ExportConfig(output_format="webp")
        assert config.output_format == "WEBP"
        assert config.file_extension == ".webp"

    def test_bands_become_float_tuple(self):
        assert ExportConfig(progress_bands=[40, 80]).progress_bands == (40.0, 80.0)

    def test_empty_collection_name_raises(self):
        with pytest.raises(ValueError, match="collection_name"):
            ExportConfig(collection_name="  ")

    def test_unsupported_format_raises(self):
        with pytest.raises(ValueError, match="output_format"):
            ExportConfig(output_format="GIF")

    @pytest.mark.parametrize("quality", [0, 101])
    def test_quality_out_of_range_raises(self, quality):
        with pytest.raises(ValueError, match="quality must be 1-100"):
            ExportConfig(quality=quality)

    @pytest.mark.parametrize("bands", [(90.0, 50.0), (0.0, 50.0), (50.0, 100.0)])
    def test_bad_bands_raise(self, bands):
        with pytest.raises(ValueError, match="progress_bands"):
            ExportConfig(progress_bands=bands)

    def test_from_dict_round_trip(self):
        config = ExportConfig(collection_name="Trip", output_format="PNG", quality=80)
        assert ExportConfig.from_dict(config.to_dict()) == config

    def test_from_dict_partial_uses_defaults(self):
        config = ExportConfig.from_dict({"quality": 70})
        assert config.quality == 70
        assert config.collection_name == "Pixert"

    @pytest.mark.parametrize(
        "data,message",
        [
            ({"quality": "95"}, "quality must be an int"),
            ({"quality": 95.0}, "quality must be an int"),
            ({"collection_name": 5}, "collection_name must be a string"),
            ({"output_format": None}, "output_format must be a string"),
            ({"copy_on_create": "yes"}, "copy_on_create must be a bool"),
            ({"quality": True}, "quality must be an int"),
            ({"progress_bands": 50}, "progress_bands must be two numbers"),
            ({"progress_bands": [10, "90"]}, "progress_bands must be two numbers"),
            ({"progress_bands": [10, 50, 90]}, "progress_bands must be two numbers"),
        ],
    )
    def test_from_dict_wrong_types_raise_value_error(self, data, message):
        with pytest.raises(ValueError, match=message):
            ExportConfig.from_dict(data)

    def test_from_dict_unknown_keys_raise(self):
        with pytest.raises(ValueError, match="Unknown config keys"):
            ExportConfig.from_dict({"qualty": 70})


class TestLoadConfig:
    def test_load_config(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"collection_name": "Trip", "output_format": "png"}))

        config = load_config(path)

        assert config.collection_name == "Trip"
        assert config.output_format == "PNG"

    def test_malformed_json_raises(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text("{")

        with pytest.raises(ValueError, match="Invalid config JSON"):
            load_config(path)

    def test_non_object_root_raises(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text("[1, 2]")

        with pytest.raises(ValueError, match="must be an object"):
            load_config(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_string_quality_in_file_raises_value_error(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"quality": "95"}))

        with pytest.raises(ValueError, match="quality must be an int"):
            load_config(path)
