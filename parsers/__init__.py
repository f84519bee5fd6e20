"""
Upload parsers for catalog imports.
"""

from parsers.product_list_parser import parse_product_names
from parsers.image_archive import ImageIndex, index_image_archive

__all__ = [
    "parse_product_names",
    "ImageIndex",
    "index_image_archive",
]
