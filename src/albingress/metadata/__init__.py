"""Naming and labelling policy for generated cloud resources."""

from albingress.metadata.labels import Labels, LabelsProvider
from albingress.metadata.names import Namer, Names, NamespacedName, digest, sanitize

__all__ = [
    "Labels",
    "LabelsProvider",
    "Namer",
    "Names",
    "NamespacedName",
    "digest",
    "sanitize",
]
