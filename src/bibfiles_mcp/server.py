"""
MCP server entry point for bibfiles-mcp.

This module initializes the MCP server and registers all tools.
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from bibfiles_mcp.config import config_manager
from bibfiles_mcp.tools.files import (
    disambiguate_paths,
    list_linked_documents,
    find_linked_file,
    suggest_file_name,
    rename_linked_file,
    copy_linked_file,
)
from bibfiles_mcp.tools.xmp import import_xmp, check_xmp

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
server = Server("bibfiles-mcp")


ENTRY_SCHEMA = {
    "type": "object",
    "description": "Bibliography entry",
    "properties": {
        "entry_type": {"type": "string", "description": "Entry type, e.g. 'article'"},
        "citation_key": {"type": "string", "description": "Citation key"},
        "fields": {
            "type": "object",
            "description": "Field name to value, e.g. {'title': '...', 'author': 'Smith, J. and Doe, A.'}",
            "additionalProperties": {"type": "string"},
        },
    },
}

DIRECTORIES_SCHEMA = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Directories to use instead of the configured file directories (optional)",
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="bibfiles_hello",
            description="Test tool to verify bibfiles-mcp is working. Returns configuration status.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": [],
            },
        ),
        Tool(
            name="disambiguate_paths",
            description="Compute the shortest trailing part of each path that tells it apart from the others. "
                        "Useful for labelling files that share a name.",
            inputSchema={
                "type": "object",
                "properties": {
                    "paths": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Paths to label",
                    },
                    "separator": {
                        "type": "string",
                        "description": "Path separator (defaults to the platform separator)",
                    },
                },
                "required": ["paths"],
            },
        ),
        Tool(
            name="list_linked_documents",
            description="List the PDF/EPUB/DjVu/PS documents in the file directories (including subdirectories) with short unique labels.",
            inputSchema={
                "type": "object",
                "properties": {
                    "directories": DIRECTORIES_SCHEMA,
                },
                "required": [],
            },
        ),
        Tool(
            name="find_linked_file",
            description="Search the file directories recursively for a file with the given name.",
            inputSchema={
                "type": "object",
                "properties": {
                    "filename": {
                        "type": "string",
                        "description": "Exact file name, e.g. 'smith2020.pdf'",
                    },
                    "directories": DIRECTORIES_SCHEMA,
                },
                "required": ["filename"],
            },
        ),
        Tool(
            name="suggest_file_name",
            description="Suggest a file name for an entry's document using a pattern such as '[bibtexkey] - [title]'.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entry": ENTRY_SCHEMA,
                    "pattern": {
                        "type": "string",
                        "description": "Naming pattern (defaults to the configured pattern)",
                    },
                },
                "required": ["entry"],
            },
        ),
        Tool(
            name="rename_linked_file",
            description="Rename a linked document after its entry, keeping the file extension.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path to the document",
                    },
                    "entry": ENTRY_SCHEMA,
                    "pattern": {
                        "type": "string",
                        "description": "Naming pattern (defaults to the configured pattern)",
                    },
                    "replace_existing": {
                        "type": "boolean",
                        "description": "Overwrite an existing file with the new name",
                    },
                },
                "required": ["file_path", "entry"],
            },
        ),
        Tool(
            name="copy_linked_file",
            description="Copy a document into a file directory (the first configured one by default).",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path to the document",
                    },
                    "destination_dir": {
                        "type": "string",
                        "description": "Target directory (optional)",
                    },
                    "replace_existing": {
                        "type": "boolean",
                        "description": "Overwrite an existing file in the target directory",
                    },
                },
                "required": ["file_path"],
            },
        ),
        Tool(
            name="import_xmp",
            description="Import the bibliography entries embedded in a PDF's XMP metadata.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path to the PDF",
                    },
                },
                "required": ["file_path"],
            },
        ),
        Tool(
            name="check_xmp",
            description="Check whether a PDF carries metadata that can be imported.",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path to the PDF",
                    },
                },
                "required": ["file_path"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""

    if name == "bibfiles_hello":
        return await handle_hello()

    if name == "disambiguate_paths":
        result = await disambiguate_paths(
            paths=arguments.get("paths", []),
            separator=arguments.get("separator"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "list_linked_documents":
        result = await list_linked_documents(
            directories=arguments.get("directories"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "find_linked_file":
        result = await find_linked_file(
            filename=arguments.get("filename"),
            directories=arguments.get("directories"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "suggest_file_name":
        result = await suggest_file_name(
            entry=arguments.get("entry", {}),
            pattern=arguments.get("pattern"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "rename_linked_file":
        result = await rename_linked_file(
            file_path=arguments.get("file_path"),
            entry=arguments.get("entry", {}),
            pattern=arguments.get("pattern"),
            replace_existing=arguments.get("replace_existing"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "copy_linked_file":
        result = await copy_linked_file(
            file_path=arguments.get("file_path"),
            destination_dir=arguments.get("destination_dir"),
            replace_existing=arguments.get("replace_existing"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "import_xmp":
        result = await import_xmp(file_path=arguments.get("file_path"))
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    if name == "check_xmp":
        result = await check_xmp(file_path=arguments.get("file_path"))
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def handle_hello() -> list[TextContent]:
    """Handle the hello test tool."""
    status_lines = ["bibfiles-mcp is running!", ""]

    config_path = config_manager.config_path
    if config_path.exists():
        status_lines.append(f"✓ Config file: {config_path}")
    else:
        status_lines.append(f"✗ Config file: {config_path} (does not exist, using defaults)")

    config = config_manager.load()
    directories = config.files.directories
    if not directories:
        status_lines.append("✗ File directories: none configured")
    for directory in directories:
        if directory.is_dir():
            status_lines.append(f"✓ File directory: {directory}")
        else:
            status_lines.append(f"✗ File directory: {directory} (does not exist)")

    status_lines.append(f"  File name pattern: {config.files.file_name_pattern}")
    if config.xmp.use_privacy_filter:
        status_lines.append(f"  XMP privacy filter: {', '.join(config.xmp.privacy_filter) or '(empty)'}")

    return [TextContent(type="text", text="\n".join(status_lines))]


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main():
    """Main entry point."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
