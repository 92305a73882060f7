"""Unit tests for provenance metadata."""

import pytest

from fatpack.build.provenance import Provenance, read_provenance, write_provenance
from fatpack.errors import ProvenanceError


class TestProvenance:
    """Test cases for Provenance stamping."""

    def test_write_and_read(self, tmp_path):
        """Test writing BUILD_INFO into a bundle and reading it back."""
        bundle = tmp_path / "VoiceKit.framework"
        bundle.mkdir()

        path = write_provenance(bundle, Provenance("M120", "1.4.0"))

        assert path == bundle / "BUILD_INFO"
        assert path.read_text() == "upstream_version=M120\npackage_version=1.4.0\n"
        assert read_provenance(bundle) == Provenance("M120", "1.4.0")

    def test_write_replaces_previous(self, tmp_path):
        """Test that a second stamp replaces the first."""
        bundle = tmp_path / "VoiceKit.framework"
        bundle.mkdir()

        write_provenance(bundle, Provenance("M119", "1.3.0"))
        write_provenance(bundle, Provenance("M120", "1.4.0"))

        assert read_provenance(bundle).upstream_version == "M120"
        assert len(list(bundle.glob("BUILD_INFO*"))) == 1

    @pytest.mark.parametrize("upstream,package", [
        ("", "1.4.0"),
        ("M120", ""),
        ("   ", "1.4.0"),
        ("M120\nextra", "1.4.0"),
    ])
    def test_rejects_empty_fields(self, upstream, package):
        with pytest.raises(ProvenanceError):
            Provenance(upstream, package)

    def test_write_missing_bundle(self, tmp_path):
        with pytest.raises(ProvenanceError, match="Bundle not found"):
            write_provenance(tmp_path / "missing.framework", Provenance("M120", "1.4.0"))

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(ProvenanceError, match="not found"):
            read_provenance(tmp_path)

    def test_read_incomplete_file(self, tmp_path):
        (tmp_path / "BUILD_INFO").write_text("upstream_version=M120\n")

        with pytest.raises(ProvenanceError, match="package_version"):
            read_provenance(tmp_path)
