"""stickerfit - fit arbitrary video into size-limited animated stickers."""

__version__ = "0.1.0"
