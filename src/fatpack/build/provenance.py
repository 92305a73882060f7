"""Build provenance metadata.

Every top-level bundle carries a BUILD_INFO file recording the upstream
media-engine version and the package version it was built as:

    upstream_version=M120
    package_version=1.4.0
"""

from dataclasses import dataclass
from pathlib import Path

from ..errors import ProvenanceError
from .layout import PROVENANCE_FILE_NAME


@dataclass(frozen=True)
class Provenance:
    """Versions stamped into a bundle."""

    upstream_version: str
    package_version: str

    def __post_init__(self):
        for key, value in (
            ("upstream_version", self.upstream_version),
            ("package_version", self.package_version),
        ):
            if not value or not value.strip() or "\n" in value:
                raise ProvenanceError(f"Invalid {key}: {value!r}")

    def to_text(self) -> str:
        return (
            f"upstream_version={self.upstream_version}\n"
            f"package_version={self.package_version}\n"
        )


def write_provenance(bundle: Path, provenance: Provenance) -> Path:
    """Write BUILD_INFO into a bundle.

    Args:
        bundle: Bundle root directory (must exist)
        provenance: Versions to record

    Returns:
        Path to the written file

    Raises:
        ProvenanceError: If the bundle does not exist
    """
    if not bundle.is_dir():
        raise ProvenanceError(f"Bundle not found: {bundle}")
    path = bundle / PROVENANCE_FILE_NAME
    path.write_text(provenance.to_text(), encoding="utf-8")
    return path


def read_provenance(bundle: Path) -> Provenance:
    """Read BUILD_INFO back from a bundle.

    Raises:
        ProvenanceError: If the file is missing or incomplete
    """
    path = bundle / PROVENANCE_FILE_NAME
    if not path.is_file():
        raise ProvenanceError(f"Provenance file not found: {path}")

    values = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        if "=" in line:
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip()

    try:
        return Provenance(
            upstream_version=values["upstream_version"],
            package_version=values["package_version"],
        )
    except KeyError as e:
        raise ProvenanceError(f"Missing {e.args[0]} in {path}") from e
