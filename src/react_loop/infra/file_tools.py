"""Built-in file tools confined to a root directory."""

from pathlib import Path
from typing import Any, Dict, Optional

from react_loop.domain.tool import (
    ToolDescriptor,
    ToolError,
    ToolInvocationRequest,
    ToolKind,
)
from react_loop.infra.tool_registry import ToolRegistry, ToolSet

FILE_TOOL_SET = "fs"
READ_FILE_ID = "fs/read-file"
WRITE_FILE_ID = "fs/write-file"

_PATH_PROPERTY = {
    "type": "string",
    "description": "Path relative to the tool root.",
}


def resolve_confined(root: Path, raw_path: Any) -> Optional[Path]:
    """
    Resolves a requested path and checks it stays under ``root``.

    Args:
        root: The confinement root.
        raw_path: The path argument supplied by the model.

    Returns:
        The resolved path, or None when it is missing or escapes the root.
    """
    if not isinstance(raw_path, str) or not raw_path.strip():
        return None
    base = root.resolve()
    candidate = Path(raw_path.strip())
    if not candidate.is_absolute():
        candidate = base / candidate
    resolved = candidate.resolve()
    if resolved != base and base not in resolved.parents:
        return None
    return resolved


def _is_within(path: Path, directory: Path) -> bool:
    directory = directory.resolve()
    return path == directory or directory in path.parents


def build_read_file_tool(root: Path) -> ToolDescriptor:
    """
    Builds the read-only file resource.

    Args:
        root: Directory the resource may read from.

    Returns:
        The ``fs/read-file`` descriptor.
    """

    def authorize(request: ToolInvocationRequest) -> bool:
        return resolve_confined(root, request.get("path")) is not None

    def read(request: ToolInvocationRequest) -> Dict[str, Any]:
        path = resolve_confined(root, request.get("path"))
        if path is None:
            raise ToolError("path argument is required.", status_hint=400)
        if not path.is_file():
            raise ToolError(f"File not found: {request.get('path')}", status_hint=404)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ToolError(f"Error reading file: {exc}", status_hint=500) from exc
        return {"path": str(path.relative_to(root.resolve())), "content": content}

    return ToolDescriptor(
        id=READ_FILE_ID,
        name="Read File",
        description="Reads a UTF-8 text file below the tool root.",
        input_schema={
            "type": "object",
            "properties": {"path": _PATH_PROPERTY},
            "required": ["path"],
        },
        callback=read,
        authorization_check=authorize,
        kind=ToolKind.RESOURCE,
        examples=('fs/read-file {"path": "README.md"}',),
    )


def build_write_file_tool(root: Path, app_dir: Optional[Path] = None) -> ToolDescriptor:
    """
    Builds the file write tool.

    Writes below ``app_dir`` are refused so the tool cannot rewrite its own
    configuration.

    Args:
        root: Directory the tool may write into.
        app_dir: Protected application directory.

    Returns:
        The ``fs/write-file`` descriptor.
    """

    def target(request: ToolInvocationRequest) -> Optional[Path]:
        path = resolve_confined(root, request.get("path"))
        if path is None or path == root.resolve():
            return None
        if app_dir is not None and _is_within(path, app_dir):
            return None
        return path

    def authorize(request: ToolInvocationRequest) -> bool:
        return target(request) is not None

    def write(request: ToolInvocationRequest) -> Dict[str, Any]:
        path = target(request)
        content = request.get("content")
        if path is None or not isinstance(content, str):
            raise ToolError(
                "path and content arguments are required.", status_hint=400
            )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ToolError(f"Error writing file: {exc}", status_hint=500) from exc
        return {
            "path": str(path.relative_to(root.resolve())),
            "bytes_written": len(content.encode("utf-8")),
        }

    return ToolDescriptor(
        id=WRITE_FILE_ID,
        name="Write File",
        description="Writes UTF-8 text to a file below the tool root.",
        input_schema={
            "type": "object",
            "properties": {
                "path": _PATH_PROPERTY,
                "content": {
                    "type": "string",
                    "description": "Content to write to the file.",
                },
            },
            "required": ["path", "content"],
        },
        callback=write,
        authorization_check=authorize,
    )


def register_builtin_tools(
    registry: ToolRegistry, root: Path, app_dir: Optional[Path] = None
) -> None:
    """
    Registers the file tools and their tool set.

    The set is loaded only while ``root`` exists as a directory.

    Args:
        registry: Registry to populate.
        root: Confinement root for both tools.
        app_dir: Directory the write tool must not touch.
    """
    registry.register_tool_set(ToolSet(FILE_TOOL_SET, probe=root.is_dir))
    registry.register(build_read_file_tool(root))
    registry.register(build_write_file_tool(root, app_dir))
