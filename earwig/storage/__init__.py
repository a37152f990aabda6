"""Artifact storage."""

from .file_manager import ArtifactStore, artifact_filename, parse_artifact_filename

__all__ = [
    "ArtifactStore",
    "artifact_filename",
    "parse_artifact_filename",
]
