#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

extractor.py

Walk a story manifest into the intermediate content model.

Extraction is structural and permissive. Elements are matched by local tag
name (namespace prefixes and letter case are ignored) at any nesting depth:
- slide                                -> Slide (with text/image/video/audio)
- trigger, action, question, quiz,
  assessment                           -> Interaction
- question, quiz, assessment           -> Question
- audio, video, image, media           -> MediaRef

One element may feed several lists (a <question> is both an Interaction and
a Question). A <quiz> wrapping <question> elements is recorded as a Question
of its own as well as each nested one.

Nothing here checks for required fields; converters and the validator deal
with gaps.

SECURITY: Uses defusedxml so entity-expansion and external-entity payloads
are rejected instead of expanded.
"""

from __future__ import annotations

import math
from typing import Dict, Iterator, List, Optional, Sequence
from xml.etree import ElementTree as ET

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from storyimport.errors import XmlParseError
from storyimport.models import (
    ContentAnalysis,
    Feedback,
    ImageRef,
    IntermediateContent,
    Interaction,
    MediaRef,
    Option,
    Position,
    Question,
    Slide,
    SlideContent,
    TextRun,
)
from storyimport.text_utils import clean_text


INTERACTION_TAGS = ("trigger", "action", "question", "quiz", "assessment")
QUESTION_TAGS = ("question", "quiz", "assessment")
MEDIA_TAGS = ("audio", "video", "image", "media")

DEFAULT_QUESTION_TYPE = "multiplechoice"
DEFAULT_SLIDE_TYPE = "standard"


# ============================================================================
# XML Helpers
# ============================================================================

def _local_name(tag: str) -> str:
    """Strip any {namespace} prefix and lower-case the tag."""
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    return tag.lower()


def _iter_named(
    elem: ET.Element,
    names: Sequence[str],
    include_self: bool = True,
) -> Iterator[ET.Element]:
    """Yield every element (document order) whose local name is in names."""
    for node in elem.iter():
        if not include_self and node is elem:
            continue
        # Comments and processing instructions have non-string tags
        if not isinstance(node.tag, str):
            continue
        if _local_name(node.tag) in names:
            yield node


def _first_named(elem: ET.Element, name: str) -> Optional[ET.Element]:
    return next(_iter_named(elem, (name,), include_self=False), None)


def _attributes(elem: ET.Element) -> Dict[str, str]:
    """Copy every attribute, keyed by local name."""
    return {_local_name(key) if "}" in key else key: value for key, value in elem.attrib.items()}


def get_attr(elem: ET.Element, *names: str) -> Optional[str]:
    """
    Return the first non-empty attribute among names (case-insensitive).

    Empty strings count as absent, so get_attr(e, "name", "title") falls
    through to title when name="" is present.
    """
    lowered = {_local_name(key): value for key, value in elem.attrib.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value:
            return value
    return None


def get_text_content(elem: Optional[ET.Element]) -> str:
    """All descendant text, flattened to plain text."""
    if elem is None:
        return ""
    return clean_text("".join(elem.itertext()))


def _to_float(value: Optional[str]) -> Optional[float]:
    """Numeric attribute value; None when absent, garbage, NaN or infinite."""
    if value is None:
        return None
    try:
        number = float(value.strip().rstrip("%").rstrip("px"))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_points(value: Optional[str]) -> int:
    """Leading integer of value; zero, missing or garbage all mean 1."""
    if not value:
        return 1
    digits = ""
    for ch in value.strip():
        if ch.isdigit() or (ch in "+-" and not digits):
            digits += ch
        else:
            break
    try:
        points = int(digits)
    except ValueError:
        return 1
    return points or 1


def _position(elem: ET.Element) -> Position:
    return Position(
        x=_to_float(get_attr(elem, "x")),
        y=_to_float(get_attr(elem, "y")),
        width=_to_float(get_attr(elem, "width")),
        height=_to_float(get_attr(elem, "height")),
    )


def _is_true(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() == "true"


# ============================================================================
# Parsing
# ============================================================================

def parse_story_xml(xml_text: str) -> ET.Element:
    """
    Parse manifest text and return the root element.

    Raises:
        XmlParseError: Markup is malformed or uses forbidden constructs
    """
    try:
        return DefusedET.fromstring(xml_text)
    except ET.ParseError as e:
        raise XmlParseError(
            "Invalid XML format in story manifest",
            suggestion="Check that the package was exported completely",
            context={"position": getattr(e, "position", None)},
            cause=e,
        )
    except DefusedXmlException as e:
        raise XmlParseError(
            "Story manifest uses forbidden XML constructs",
            context={"construct": type(e).__name__},
            cause=e,
        )


# ============================================================================
# Slides
# ============================================================================

def extract_slide_content(slide_elem: ET.Element) -> SlideContent:
    """Collect text, image, video and audio objects nested under a slide."""
    content = SlideContent()

    for node in _iter_named(slide_elem, ("text",), include_self=False):
        value = get_text_content(node) or clean_text(get_attr(node, "value"))
        content.text.append(TextRun(
            id=get_attr(node, "id"),
            value=value,
            format=get_attr(node, "format"),
            position=_position(node),
        ))

    for node in _iter_named(slide_elem, ("image",), include_self=False):
        content.images.append(ImageRef(
            id=get_attr(node, "id"),
            src=get_attr(node, "src", "source"),
            alt=get_attr(node, "alt"),
            position=_position(node),
        ))

    for node in _iter_named(slide_elem, ("video",), include_self=False):
        content.videos.append(MediaRef(
            id=get_attr(node, "id"),
            type="video",
            src=get_attr(node, "src", "source"),
            title=get_attr(node, "title", "name"),
            duration=get_attr(node, "duration"),
        ))

    for node in _iter_named(slide_elem, ("audio",), include_self=False):
        content.audio.append(MediaRef(
            id=get_attr(node, "id"),
            type="audio",
            src=get_attr(node, "src", "source"),
            title=get_attr(node, "title", "name"),
            duration=get_attr(node, "duration"),
        ))

    return content


def extract_slides(root: ET.Element) -> List[Slide]:
    slides = []
    for index, node in enumerate(_iter_named(root, ("slide",))):
        slides.append(Slide(
            id=get_attr(node, "id") or f"slide_{index}",
            title=get_attr(node, "name", "title") or f"Slide {index + 1}",
            type=get_attr(node, "type") or DEFAULT_SLIDE_TYPE,
            duration=get_attr(node, "duration"),
            content=extract_slide_content(node),
        ))
    return slides


# ============================================================================
# Interactions
# ============================================================================

def extract_interactions(root: ET.Element) -> List[Interaction]:
    interactions = []
    for node in _iter_named(root, INTERACTION_TAGS):
        interactions.append(Interaction(
            id=get_attr(node, "id"),
            type=_local_name(node.tag),
            trigger=get_attr(node, "trigger"),
            action=get_attr(node, "action"),
            target=get_attr(node, "target"),
            condition=get_attr(node, "condition"),
            parameters=_attributes(node),
        ))
    return interactions


# ============================================================================
# Questions
# ============================================================================

def extract_question_prompt(elem: ET.Element) -> str:
    """
    Resolve question text.

    Order: prompt attribute, then a <prompt>/<stem> child, then the element's
    own leading text (before any option children).
    """
    prompt = get_attr(elem, "prompt")
    if prompt:
        return clean_text(prompt)

    for name in ("prompt", "stem"):
        child = _first_named(elem, name)
        if child is not None:
            text = get_text_content(child)
            if text:
                return text

    return clean_text(elem.text)


def extract_question_options(question_elem: ET.Element) -> List[Option]:
    options = []
    for node in _iter_named(question_elem, ("option",), include_self=False):
        options.append(Option(
            id=get_attr(node, "id"),
            text=get_text_content(node) or clean_text(get_attr(node, "text")),
            is_correct=_is_true(get_attr(node, "correct")) or _is_true(get_attr(node, "iscorrect")),
            feedback=get_attr(node, "feedback") or "",
        ))
    return options


def extract_feedback(elem: ET.Element) -> Feedback:
    return Feedback(
        correct=get_text_content(_first_named(elem, "correctfeedback")),
        incorrect=get_text_content(_first_named(elem, "incorrectfeedback")),
        general=get_text_content(_first_named(elem, "feedback")),
    )


def extract_questions(root: ET.Element) -> List[Question]:
    questions = []
    for node in _iter_named(root, QUESTION_TAGS):
        questions.append(Question(
            id=get_attr(node, "id"),
            type=get_attr(node, "questiontype", "type") or DEFAULT_QUESTION_TYPE,
            prompt=extract_question_prompt(node),
            options=extract_question_options(node),
            correct_answer=get_attr(node, "correctanswer", "correct"),
            points=_to_points(get_attr(node, "points")),
            feedback=extract_feedback(node),
        ))
    return questions


# ============================================================================
# Multimedia
# ============================================================================

def extract_multimedia(root: ET.Element) -> List[MediaRef]:
    multimedia = []
    for node in _iter_named(root, MEDIA_TAGS):
        multimedia.append(MediaRef(
            id=get_attr(node, "id"),
            type=_local_name(node.tag),
            src=get_attr(node, "src", "source"),
            title=get_attr(node, "title", "name"),
            duration=get_attr(node, "duration"),
        ))
    return multimedia


# ============================================================================
# Content Model Assembly
# ============================================================================

def analyze_content(content: IntermediateContent) -> ContentAnalysis:
    return ContentAnalysis(
        has_quiz=len(content.questions) > 0,
        has_interactions=len(content.interactions) > 0,
        slide_count=len(content.slides),
        question_count=len(content.questions),
        media_count=len(content.multimedia),
    )


def extract_content(
    manifest_text: Optional[str],
    files: Optional[List[str]] = None,
) -> IntermediateContent:
    """
    Build the intermediate content model for one package.

    Args:
        manifest_text: Decoded manifest XML, or None when the archive had none
        files: Archive entry names

    Returns:
        IntermediateContent; all lists empty when there is no manifest

    Raises:
        XmlParseError: Manifest markup is malformed
    """
    content = IntermediateContent(files=list(files or []), story_xml=manifest_text)

    if manifest_text and manifest_text.strip():
        root = parse_story_xml(manifest_text)
        content.slides = extract_slides(root)
        content.interactions = extract_interactions(root)
        content.questions = extract_questions(root)
        content.multimedia = extract_multimedia(root)

    content.analysis = analyze_content(content)
    return content
