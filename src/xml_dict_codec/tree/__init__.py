"""Tree-value layer for XML/tree-value conversion.

Key Components:
    TreeValueBuilder: Folds XML events into nested dicts and lists (decoder)
    TreeValueSerializer: Writes nested dicts and lists as XML (encoder)
    to_tree_value / from_tree_value: Native value adapters
"""

from .builder import Frame, TreeValueBuilder, merge_child
from .marshal import from_tree_value, to_tree_value
from .serializer import XML_DECLARATION, TreeValueSerializer, format_scalar

__all__ = [
    "Frame",
    "TreeValueBuilder",
    "merge_child",
    "from_tree_value",
    "to_tree_value",
    "XML_DECLARATION",
    "TreeValueSerializer",
    "format_scalar",
]
