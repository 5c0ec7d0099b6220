"""
Record interchange: CSV encode/decode and the JSON export projection.
"""

from .csv_codec import DecodeResult, decode_csv, encode_csv
from .json_codec import decode_json, encode_json
from .options import IncludeOptions

__all__ = ["DecodeResult", "decode_csv", "encode_csv", "decode_json", "encode_json", "IncludeOptions"]
