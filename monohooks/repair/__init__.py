"""Workspace metadata repair helpers."""

from .encoding import EncodingProfile, read_text, write_preserving_encoding
from .nx import NxJsonDocument, NxRepairer, PluginEntry, RepairError, RepairReport
from .tagger import ProjectTagger, TaggingResult

__all__ = [
    "EncodingProfile",
    "NxJsonDocument",
    "NxRepairer",
    "PluginEntry",
    "ProjectTagger",
    "RepairError",
    "RepairReport",
    "TaggingResult",
    "read_text",
    "write_preserving_encoding",
]
