"""Tiled interchange."""

from .tmx import TMXInterface, encode_gid, decode_gid

__all__ = [
    "TMXInterface",
    "encode_gid",
    "decode_gid",
]
