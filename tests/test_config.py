"""
Tests for export options.
"""

import pytest

from surveyflat.config import ExportOptions, load_options, options_from_dict, options_from_yaml
from surveyflat.errors import ConfigError
from surveyflat.model import IncludeMeta


class TestOptionsFromDict:

    def test_defaults(self):
        assert options_from_dict(None) == ExportOptions()
        assert options_from_dict({}).question_option_separator == "-"

    def test_include_meta(self):
        options = options_from_dict({"include_meta": {"responded_times": True, "position": 1}})
        assert options.include_meta == IncludeMeta(responded_times=True, position=True)

    def test_unknown_key(self):
        with pytest.raises(ConfigError):
            options_from_dict({"seperator": "_"})

    def test_unknown_meta_key(self):
        with pytest.raises(ConfigError):
            options_from_dict({"include_meta": {"everything": True}})

    def test_bad_format(self):
        with pytest.raises(ConfigError):
            options_from_dict({"export_format": "xlsx"})

    def test_empty_separator(self):
        with pytest.raises(ConfigError):
            options_from_dict({"question_option_separator": ""})

    def test_bad_log_level(self):
        with pytest.raises(ConfigError):
            options_from_dict({"log_level": "verbose"})


class TestOptionsFromYaml:

    def test_parse(self):
        options = options_from_yaml(
            "question_option_separator: '__'\n"
            "short_keys: true\n"
            "export_format: long\n"
            "extra_context_columns: [device]\n"
        )
        assert options.question_option_separator == "__"
        assert options.short_keys is True
        assert options.export_format == "long"
        assert options.extra_context_columns == ["device"]
        assert options.include_meta is None

    def test_empty_document(self):
        assert options_from_yaml("") == ExportOptions()

    def test_invalid_yaml(self):
        with pytest.raises(ConfigError):
            options_from_yaml("short_keys: [unclosed")

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            options_from_yaml("- wide\n- long\n")

    def test_load_options(self, tmp_path):
        path = tmp_path / "export.yaml"
        path.write_text("export_format: json\n", encoding="utf-8")
        assert load_options(str(path)).export_format == "json"
