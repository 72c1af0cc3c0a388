#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

errors.py

Exception hierarchy for the story import pipeline.

Every error carries a human-readable message plus an optional suggestion,
a context dict for diagnostics, and the underlying cause. Batch processing
records str(error) in its failure list, so the message has to stand alone.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class StoryImportError(Exception):
    """Base class for all story import errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        text = self.message
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        if self.suggestion:
            text = f"{text} ({self.suggestion})"
        return text


class InvalidArchive(StoryImportError):
    """Container could not be opened or read as a ZIP archive."""
    pass


class XmlParseError(StoryImportError):
    """Manifest markup is malformed."""
    pass


class UnsupportedFormat(StoryImportError):
    """Input does not look like an archive at all."""
    pass


class ValidationError(StoryImportError):
    """Converted document is missing required fields."""

    def __init__(self, message: str, errors: Optional[List[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])


class IntegrationError(StoryImportError):
    """A downstream collaborator hook failed."""
    pass


class ProcessedFileNotFound(StoryImportError):
    """No processed file is recorded under the requested id."""
    pass


class UnsupportedExportFormat(StoryImportError):
    """Requested export format is not one of the known serialisers."""
    pass
