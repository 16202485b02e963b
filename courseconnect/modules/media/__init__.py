from .store import (
    InvalidImage,
    MediaStore,
    StoredImage,
    compress_image,
    media_store,
    to_data_url,
)

__all__ = [
    "InvalidImage",
    "MediaStore",
    "StoredImage",
    "compress_image",
    "media_store",
    "to_data_url",
]
