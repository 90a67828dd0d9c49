"""Core utilities package.

Small helpers with no dependencies on the rest of stickerfit: subprocess
invocation and display formatting.
"""

from stickerfit.core.formatting import format_duration, format_file_size
from stickerfit.core.subprocess_utils import run_command

__all__ = [
    "format_duration",
    "format_file_size",
    "run_command",
]
