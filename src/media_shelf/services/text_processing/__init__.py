"""Text processing services - natural ordering and asset URL encoding."""

from media_shelf.services.text_processing.asset_url import (
    decode_path,
    encode_path,
    from_asset_url,
    to_asset_url,
)
from media_shelf.services.text_processing.natural_order import natural_key, natural_sorted

__all__ = [
    "natural_key",
    "natural_sorted",
    "encode_path",
    "decode_path",
    "to_asset_url",
    "from_asset_url",
]
