"""
bibfiles-mcp: linked-file helpers and XMP import for bibliography libraries.

Resolves, names, copies and renames the documents linked from bibliography
entries, and imports entries from XMP-annotated PDFs.
"""

__version__ = "0.1.0"
