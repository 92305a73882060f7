"""Clean/teardown of fatpack outputs.

Removes every canonical output for both build types, the work directory
and the caches created by the tools fatpack drives. No external tool is
invoked. Paths that do not exist are skipped, so cleaning twice is fine.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..config.project_settings import ProjectSettings
from ..errors import CleanError
from .fs_utils import remove_path
from .layout import ArtifactLayout

logger = logging.getLogger(__name__)


@dataclass
class CleanResult:
    """Paths removed and paths that were already absent."""

    removed: List[Path] = field(default_factory=list)
    missing: List[Path] = field(default_factory=list)


class Cleaner:
    """Removes all filesystem state fatpack knows about.

    Args:
        settings: Project settings
        show_progress: Print each removed path
    """

    def __init__(self, settings: ProjectSettings, show_progress: bool = False):
        self.settings = settings
        self.show_progress = show_progress

    def targets(self) -> List[Path]:
        """Every path clean() removes, in removal order."""
        paths: List[Path] = []
        layouts = ArtifactLayout.for_all_build_types(self.settings)
        for layout in layouts:
            paths.extend(layout.canonical_outputs())
            paths.append(layout.build_type_root)
            paths.append(layout.work_root)
        paths.extend(layouts[0].external_caches())

        unique: List[Path] = []
        for path in paths:
            if path not in unique:
                unique.append(path)
        return unique

    def clean(self) -> CleanResult:
        """Remove every known output.

        Returns:
            CleanResult listing removed and already-missing paths

        Raises:
            CleanError: If an existing path cannot be removed
        """
        result = CleanResult()
        for path in self.targets():
            try:
                removed = remove_path(path)
            except FileNotFoundError:
                removed = False  # Vanished between the check and the delete
            except OSError as e:
                raise CleanError(f"Failed to remove {path}: {e}") from e

            if removed:
                result.removed.append(path)
                if self.show_progress:
                    print(f"Removed {path}")
            else:
                result.missing.append(path)

        for root in (self.settings.output_dir, self.settings.work_dir):
            self._remove_if_empty(root)

        logger.debug("Clean removed %d path(s), %d already absent",
                     len(result.removed), len(result.missing))
        return result

    @staticmethod
    def _remove_if_empty(path: Path) -> None:
        try:
            path.rmdir()
        except FileNotFoundError:
            pass
        except OSError:
            logger.debug("Leaving non-empty directory %s", path)
