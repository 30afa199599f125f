"""
Tool implementations for bibfiles-mcp.

Each module in this package implements a group of related tools:
- files.py: Linked-file naming, search, copy and rename
- xmp.py: Importing entries from XMP-annotated PDFs
"""
