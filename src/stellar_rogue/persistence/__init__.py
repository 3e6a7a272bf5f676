"""Persistence layer: abstract key-value stores and the save record codec."""

from .codec import SaveRecord, decode_record, encode_record, parse_json, validate
from .store import FileStore, InMemoryStore, KeyValueStore, default_store_root

__all__ = [
    "FileStore",
    "InMemoryStore",
    "KeyValueStore",
    "SaveRecord",
    "decode_record",
    "default_store_root",
    "encode_record",
    "parse_json",
    "validate",
]
