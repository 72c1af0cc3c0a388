#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

models.py

Data models shared by the story import pipeline stages.

The intermediate content model is built once per archive by the extractor
and read by the classifier and converters. Converted documents themselves
stay plain dicts so they serialise without help.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_camel_dict(value: Any) -> Any:
    """Recursively convert dataclasses to JSON-shaped dicts with camelCase keys.

    Plain dict keys are kept verbatim, so XML attribute bags survive untouched.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): to_camel_dict(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_camel_dict(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_camel_dict(v) for v in value]
    return value


class TemplateType(str, Enum):
    """Closed set of native activity kinds."""

    MCQ = "mcq"
    TRUEFALSE = "truefalse"
    FLIPCARDS = "flipcards"
    DRAGDROP = "dragdrop"
    LABELDIAGRAM = "labeldiagram"
    TIMELINE = "timeline"
    CONTENTREVEAL = "contentreveal"
    SURVEY = "survey"
    PICKMANY = "pickmany"
    GAMEARENA = "gamearena"
    SCORMVIEWER = "scormviewer"


class ProcessingStatus(str, Enum):
    CONVERTED = "converted"
    FAILED = "failed"


# ============================================================================
# Intermediate Content Model
# ============================================================================

@dataclass
class Position:
    """Layout attributes copied from a slide object; None when absent or non-numeric."""
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass
class TextRun:
    id: Optional[str]
    value: str
    format: Optional[str] = None
    position: Position = field(default_factory=Position)


@dataclass
class ImageRef:
    id: Optional[str]
    src: Optional[str]
    alt: Optional[str] = None
    position: Position = field(default_factory=Position)


@dataclass
class MediaRef:
    """Audio, video, image or generic media reference."""
    id: Optional[str]
    type: str
    src: Optional[str]
    title: Optional[str] = None
    duration: Optional[str] = None


@dataclass
class SlideContent:
    text: List[TextRun] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    videos: List[MediaRef] = field(default_factory=list)
    audio: List[MediaRef] = field(default_factory=list)


@dataclass
class Slide:
    id: str
    title: str
    type: str = "standard"  # free-form: standard, timeline, reveal, ...
    duration: Optional[str] = None
    content: SlideContent = field(default_factory=SlideContent)


@dataclass
class Interaction:
    id: Optional[str]
    type: str  # trigger, action, question, quiz, assessment
    trigger: Optional[str] = None
    action: Optional[str] = None
    target: Optional[str] = None
    condition: Optional[str] = None
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass
class Option:
    id: Optional[str]
    text: str
    is_correct: bool = False
    feedback: str = ""


@dataclass
class Feedback:
    correct: str = ""
    incorrect: str = ""
    general: str = ""


@dataclass
class Question:
    id: Optional[str]
    type: str
    prompt: str
    options: List[Option] = field(default_factory=list)
    correct_answer: Optional[str] = None
    points: int = 1
    feedback: Feedback = field(default_factory=Feedback)


@dataclass
class ContentAnalysis:
    has_quiz: bool = False
    has_interactions: bool = False
    slide_count: int = 0
    question_count: int = 0
    media_count: int = 0


@dataclass
class IntermediateContent:
    """Format-agnostic view of one manifest, built once per archive."""
    files: List[str] = field(default_factory=list)
    story_xml: Optional[str] = None
    slides: List[Slide] = field(default_factory=list)
    interactions: List[Interaction] = field(default_factory=list)
    questions: List[Question] = field(default_factory=list)
    multimedia: List[MediaRef] = field(default_factory=list)
    analysis: ContentAnalysis = field(default_factory=ContentAnalysis)

    def to_dict(self) -> Dict[str, Any]:
        return to_camel_dict(self)


# ============================================================================
# Pipeline Results
# ============================================================================

@dataclass
class InputFile:
    """Raw bytes of an uploaded package plus its declared name and MIME type."""
    name: str
    data: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path, mime_type: Optional[str] = None) -> "InputFile":
        path = Path(path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type)


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class ParseResult:
    template_type: TemplateType
    data: Dict[str, Any]
    original_file: str
    file_size: int
    content: IntermediateContent
    validation: ValidationResult

    @property
    def analysis(self) -> ContentAnalysis:
        return self.content.analysis

    def to_dict(self) -> Dict[str, Any]:
        return {
            "templateType": self.template_type.value,
            "data": self.data,
            "originalFile": self.original_file,
            "fileSize": self.file_size,
            "analysis": to_camel_dict(self.analysis),
            "validation": to_camel_dict(self.validation),
        }


@dataclass(frozen=True)
class ProcessedFile:
    """One conversion outcome. Re-processing creates a new entry rather than editing this one."""
    id: str
    original_file_name: str
    original_file_size: int
    template_type: TemplateType
    converted_data: Dict[str, Any]
    parse_result: ParseResult
    processed_at: datetime
    status: ProcessingStatus = ProcessingStatus.CONVERTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "originalFileName": self.original_file_name,
            "originalFileSize": self.original_file_size,
            "templateType": self.template_type.value,
            "convertedData": self.converted_data,
            "parseResult": self.parse_result.to_dict(),
            "processedAt": self.processed_at.isoformat(),
            "status": self.status.value,
        }


@dataclass
class BatchFailure:
    file_name: str
    error: str


@dataclass
class BatchResult:
    successful: List[ProcessedFile] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)
    total: int = 0
