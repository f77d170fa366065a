"""NPM registry access: packument retrieval and decoding."""

from .client import decode_metadata, encode_package_name, fetch_metadata, metadata_url

__all__ = [
    "decode_metadata",
    "encode_package_name",
    "fetch_metadata",
    "metadata_url",
]
