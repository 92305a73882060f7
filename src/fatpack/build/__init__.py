"""
Build pipeline components for fatpack.

This module provides the pipeline implementation including:
- Canonical artifact layout
- External tool invocation
- Universal binary merging (lipo)
- Binding header generation (cbindgen)
- Module descriptor composition and provenance stamping
- Stage builders, pipeline orchestration and teardown
"""

from .cleaner import Cleaner, CleanResult
from .header_generator import HeaderArtifact, HeaderGenerator
from .layout import ArtifactLayout
from .module_map import compose_module_map, write_module_map
from .orchestrator import PipelineOrchestrator, PipelineResult
from .provenance import Provenance, read_provenance, write_provenance
from .stage import StageBuilder, StageResult
from .stage_core_library import CoreLibraryStage
from .stage_factory import StageFactory
from .stage_media_engine import MediaEngineStage
from .stage_platform import ApplicationPlatformStage
from .tool_runner import ExternalTool, SubprocessToolRunner, ToolResult, ToolRunner
from .universal_merger import ArchitectureSlice, UniversalBinaryMerger

__all__ = [
    "Cleaner",
    "CleanResult",
    "HeaderArtifact",
    "HeaderGenerator",
    "ArtifactLayout",
    "compose_module_map",
    "write_module_map",
    "PipelineOrchestrator",
    "PipelineResult",
    "Provenance",
    "read_provenance",
    "write_provenance",
    "StageBuilder",
    "StageResult",
    "CoreLibraryStage",
    "StageFactory",
    "MediaEngineStage",
    "ApplicationPlatformStage",
    "ExternalTool",
    "SubprocessToolRunner",
    "ToolResult",
    "ToolRunner",
    "ArchitectureSlice",
    "UniversalBinaryMerger",
]
