"""Size-fitting WebP sticker transcoder."""

from stickerfit.transcoder.driver import SizeFittingTranscoder
from stickerfit.transcoder.models import ConversionRequest, iter_parameter_grid

__all__ = [
    "ConversionRequest",
    "SizeFittingTranscoder",
    "iter_parameter_grid",
]
