"""
Selector Module - Black Box Interface

Purpose: Let the user choose cluster contexts and a namespace
Interface: check_picker(), get_contexts(), select_clusters(),
           get_namespaces(), select_namespace()
Hidden: kubectl listing commands, fzf invocation, prefix stripping

A single candidate is chosen automatically without opening the picker.
"""

from .selector import (
    NoClustersSelectedError,
    PickerNotFoundError,
    SelectionError,
    Selector,
)

__all__ = [
    "NoClustersSelectedError",
    "PickerNotFoundError",
    "SelectionError",
    "Selector",
]
