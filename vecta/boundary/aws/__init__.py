"""
AWS boundary modules.

Exports: ObjectStorage
"""

from .s3_client import ObjectStorage, build_object_storage

__all__ = ["ObjectStorage", "build_object_storage"]
