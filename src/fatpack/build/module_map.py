"""Module descriptor (module.modulemap) composition."""

from pathlib import Path

from ..errors import ModuleMapError

MODULE_MAP_TEMPLATE = """\
framework module {framework_name} {{
    umbrella header "{framework_name}.h"

    export *
    module * {{ export * }}

    explicit module Private {{
        header "{header_file_name}"
        link "{binary_name}"
        export *
    }}
}}
"""


def compose_module_map(framework_name: str, header_file_name: str, binary_name: str) -> str:
    """Compose the module descriptor for the platform framework.

    The private sub-module exposes the generated binding header and links
    the core library, so importers of Framework.Private get the C interface.

    Args:
        framework_name: Framework (and umbrella header) name, e.g. "VoiceKit"
        header_file_name: Binding header file name, e.g. "voicekit_core.h"
        binary_name: Link name of the core library, e.g. "voicekit_core"

    Returns:
        Module descriptor text

    Raises:
        ModuleMapError: If an input is empty or contains quotes or newlines
    """
    for label, value in (
        ("framework name", framework_name),
        ("header file name", header_file_name),
        ("binary name", binary_name),
    ):
        if not value or any(c in value for c in '"\n\r{}'):
            raise ModuleMapError(f"Invalid {label} for module map: {value!r}")

    return MODULE_MAP_TEMPLATE.format(
        framework_name=framework_name,
        header_file_name=header_file_name,
        binary_name=binary_name,
    )


def write_module_map(path: Path, text: str) -> Path:
    """Write a module descriptor, replacing any previous one."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
