"""Generated asset storage."""

from kidsjoy.assets.image_cache import DEFAULT_EPOCH, AssetCache, ImageAsset

__all__ = ["AssetCache", "DEFAULT_EPOCH", "ImageAsset"]
