"""Domain models and enums for stickerfit.

This package contains the value types shared by the codec, the scratch
manager, and the transcoder driver:

- Models: ParameterPair, AttemptResult, AttemptRecord, ConversionReport
- Enums: ConversionState

Usage:
    from stickerfit.domain import ParameterPair, AttemptResult
"""

from .enums import ConversionState
from .models import (
    AttemptRecord,
    AttemptResult,
    ConversionReport,
    ParameterPair,
)

__all__ = [
    # Models
    "AttemptRecord",
    "AttemptResult",
    "ConversionReport",
    "ParameterPair",
    # Enums
    "ConversionState",
]
