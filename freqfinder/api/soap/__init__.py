"""
Hand-built RPC client and markup extraction for the RadioReference service.
"""

from .envelope import RadioReferenceRPC, escape_xml, param
from .markup import get_groups, get_text

__all__ = ["RadioReferenceRPC", "escape_xml", "param", "get_groups", "get_text"]
