"""Tool category modules for the Batch Operations MCP server.

- batch_tools: batch_file_operations
- analysis_tools: batch_code_analysis, batch_transform
"""

from .analysis_tools import register_analysis_tools
from .batch_tools import register_batch_tools

__all__ = [
    "register_analysis_tools",
    "register_batch_tools",
]
