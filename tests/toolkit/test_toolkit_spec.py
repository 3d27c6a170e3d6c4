"""
Tests for the pinned toolkit release description.
"""

from pathlib import Path

import pytest

from pinbridge.core.exceptions import ConfigurationError
from pinbridge.toolkit.spec import DOWNLOAD_BASE, ToolkitSpec

PINNED_URL = (
    "https://software.intel.com/sites/landingpage/pintool/downloads/"
    "pin-external-3.31-98869-gfa6f126a8-gcc-linux.tar.gz"
)


class TestToolkitSpecDefaults:
    """Test the pinned release defaults."""

    def test_download_url(self):
        assert ToolkitSpec().download_url == PINNED_URL

    def test_release_name(self):
        spec = ToolkitSpec()

        assert spec.release_name == "pin-external-3.31-98869-gfa6f126a8-gcc-linux"

    def test_explicit_url_wins(self):
        spec = ToolkitSpec(url="https://mirror.example.com/pin.tar.gz")

        assert spec.download_url == "https://mirror.example.com/pin.tar.gz"

    def test_version_changes_url(self):
        spec = ToolkitSpec(version="3.30", build="98830-g1d7b601b3")

        assert spec.download_url == (
            f"{DOWNLOAD_BASE}/pin-external-3.30-98830-g1d7b601b3-gcc-linux.tar.gz"
        )

    def test_targets_in_out_dir(self, tmp_path):
        spec = ToolkitSpec()

        target = spec.download_target(tmp_path)
        assert target.url == PINNED_URL
        assert target.destination == tmp_path / "pin.tar.gz"
        assert spec.extraction_root(tmp_path) == tmp_path / "toolkit"
        assert spec.signature_target(tmp_path) is None

    def test_signature_target(self, tmp_path):
        spec = ToolkitSpec(signature_url="https://example.com/pin.tar.gz.sig")

        target = spec.signature_target(tmp_path)
        assert target.destination == tmp_path / "pin.tar.gz.sig"

    def test_target_triple(self):
        assert ToolkitSpec().target_triple.pin_arch == "intel64"


class TestToolkitSpecValidation:
    """Test field validation."""

    def test_unsupported_target(self):
        with pytest.raises(ConfigurationError, match="Unsupported target"):
            ToolkitSpec(target="riscv64gc-unknown-linux-gnu")

    @pytest.mark.parametrize("field", ["version", "build", "package_pattern"])
    def test_empty_field(self, field):
        with pytest.raises(ConfigurationError, match=field):
            ToolkitSpec(**{field: ""})

    @pytest.mark.parametrize("field", ["archive_name", "extract_subdir"])
    @pytest.mark.parametrize(
        "value", ["", ".", "..", "../..", "../x", "a/b", "/tmp/pin", None]
    )
    def test_output_names_stay_in_out_dir(self, field, value):
        with pytest.raises(ConfigurationError, match=field):
            ToolkitSpec(**{field: value})

    def test_custom_output_names(self, tmp_path):
        spec = ToolkitSpec(archive_name="pin-3.31.tgz", extract_subdir="pin-root")

        assert spec.download_target(tmp_path).destination == tmp_path / "pin-3.31.tgz"
        assert spec.extraction_root(tmp_path) == tmp_path / "pin-root"

    def test_from_dict_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="Unknown toolkit"):
            ToolkitSpec.from_dict({"version": "3.31", "flavour": "vanilla"})

    def test_from_dict_not_mapping(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            ToolkitSpec.from_dict(["3.31"])

    def test_from_dict_converts_numbers(self):
        assert ToolkitSpec.from_dict({"version": 3.31}).version == "3.31"


class TestToolkitSpecYaml:
    """Test loading from YAML files."""

    def test_top_level_fields(self, tmp_path):
        path = tmp_path / "pin.yaml"
        path.write_text('version: "3.30"\nbuild: "98830-g1d7b601b3"\n')

        spec = ToolkitSpec.from_yaml(path)

        assert spec.version == "3.30"
        assert spec.build == "98830-g1d7b601b3"
        assert spec.compiler == "gcc"

    def test_nested_under_toolkit(self, tmp_path):
        path = tmp_path / "pin.yaml"
        path.write_text("toolkit:\n  url: https://mirror.example.com/pin.tgz\n")

        spec = ToolkitSpec.from_yaml(str(path))

        assert spec.download_url == "https://mirror.example.com/pin.tgz"

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "pin.yaml"
        path.write_text("")

        assert ToolkitSpec.from_yaml(path) == ToolkitSpec()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ToolkitSpec.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "pin.yaml"
        path.write_text("version: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ToolkitSpec.from_yaml(path)

    def test_accepts_path_objects(self, tmp_path):
        path = Path(tmp_path) / "pin.yaml"
        path.write_text("compiler: gcc\n")

        assert ToolkitSpec.from_yaml(path).compiler == "gcc"

    def test_null_extract_subdir(self, tmp_path):
        path = tmp_path / "pin.yaml"
        path.write_text("extract_subdir: null\n")

        with pytest.raises(ConfigurationError, match="extract_subdir"):
            ToolkitSpec.from_yaml(path)

    def test_traversing_archive_name(self, tmp_path):
        path = tmp_path / "pin.yaml"
        path.write_text("toolkit:\n  archive_name: ../pin.tar.gz\n")

        with pytest.raises(ConfigurationError, match="archive_name"):
            ToolkitSpec.from_yaml(path)
