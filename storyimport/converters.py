#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

converters.py

Map an intermediate content model onto one native activity document.

There is one converter per template type. Each is total over the content
model: missing pieces become placeholders or empty lists, never exceptions.
Every document has the same envelope:

    {
      "metadata": {"id", "title", "template", "createdAt", "updatedAt"},
      "config": {"timeLimit": 0, "allowRetakes": true, "showFeedback": true},
      ...type-specific payload...
    }

Sub-entity ids (questions, cards, pairs, ...) prefer the id found in the
manifest and are de-duplicated per conversion run.

Usage:
    from storyimport.converters import convert_to_template

    document = convert_to_template(content, TemplateType.MCQ)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set

from storyimport.classifier import is_drag_interaction, is_pickmany_question, is_truefalse_question
from storyimport.config import (
    DEFAULT_PACKAGE_ROOT,
    DEFAULT_PACKAGE_WIDTH,
    GAMEARENA_HEIGHT,
    SCORMVIEWER_HEIGHT,
)
from storyimport.models import IntermediateContent, Option, Question, Slide, TemplateType


# Stored as-is when no option is marked correct; not a valid option index
NO_CORRECT_ANSWER = -1

PICKMANY_MIN_OPTIONS = 2  # Fallback question needs strictly more options than this

FLIPCARD_BACK_PLACEHOLDER = "More information on this topic"
TIMELINE_DESCRIPTION_PLACEHOLDER = "Event description"
PANEL_CONTENT_PLACEHOLDER = "Panel content"
PICKMANY_PROMPT = "Select all correct answers:"
PACKAGE_INSTRUCTIONS = "This content was converted from a Storyline package"

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")

ID_PREFIXES = {
    TemplateType.MCQ: "mcq",
    TemplateType.TRUEFALSE: "tf",
    TemplateType.FLIPCARDS: "fc",
    TemplateType.DRAGDROP: "dd",
    TemplateType.LABELDIAGRAM: "ld",
    TemplateType.TIMELINE: "tl",
    TemplateType.CONTENTREVEAL: "cr",
    TemplateType.SURVEY: "sv",
    TemplateType.PICKMANY: "pm",
    TemplateType.GAMEARENA: "ga",
    TemplateType.SCORMVIEWER: "scorm",
}

DEFAULT_TITLES = {
    TemplateType.MCQ: "Converted MCQ Quiz",
    TemplateType.TRUEFALSE: "Converted True/False Quiz",
    TemplateType.FLIPCARDS: "Converted Flash Cards",
    TemplateType.DRAGDROP: "Converted Drag & Drop",
    TemplateType.LABELDIAGRAM: "Converted Label Diagram",
    TemplateType.TIMELINE: "Converted Timeline",
    TemplateType.CONTENTREVEAL: "Converted Content Reveal",
    TemplateType.SURVEY: "Converted Survey",
    TemplateType.PICKMANY: "Converted Pick Many",
    TemplateType.GAMEARENA: "Converted Game Arena",
    TemplateType.SCORMVIEWER: "Converted SCORM Package",
}


# ============================================================================
# Conversion Context
# ============================================================================

class IdAllocator:
    """Hands out ids that are unique within one conversion run."""

    def __init__(self):
        self._seen: Set[str] = set()

    def allocate(self, preferred: Optional[str], fallback: str) -> str:
        base = preferred or fallback
        candidate = base
        suffix = 2
        while candidate in self._seen:
            candidate = f"{base}_{suffix}"
            suffix += 1
        self._seen.add(candidate)
        return candidate


@dataclass
class ConversionContext:
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ids: IdAllocator = field(default_factory=IdAllocator)
    package_root: str = DEFAULT_PACKAGE_ROOT
    package_name: Optional[str] = None

    @property
    def package_path(self) -> str:
        if self.package_name:
            return f"{self.package_root}/{self.package_name}"
        return self.package_root


def _first_slide_title(content: IntermediateContent) -> Optional[str]:
    return content.slides[0].title if content.slides else None


def build_document(
    template_type: TemplateType,
    title: Optional[str],
    payload: Dict[str, Any],
    ctx: ConversionContext,
    show_feedback: bool = True,
) -> Dict[str, Any]:
    """Wrap a type-specific payload in the metadata/config envelope."""
    timestamp = ctx.now.isoformat()
    document: Dict[str, Any] = {
        "metadata": {
            "id": f"{ID_PREFIXES[template_type]}_{uuid.uuid4().hex[:12]}",
            "title": title or DEFAULT_TITLES[template_type],
            "template": template_type.value,
            "createdAt": timestamp,
            "updatedAt": timestamp,
        },
        "config": {
            "timeLimit": 0,
            "allowRetakes": True,
            "showFeedback": show_feedback,
        },
    }
    document.update(payload)
    return document


def find_correct_index(options: List[Option]) -> int:
    """Index of the first correct option, or NO_CORRECT_ANSWER."""
    for index, option in enumerate(options):
        if option.is_correct:
            return index
    return NO_CORRECT_ANSWER


def _explanation(question: Question) -> str:
    return question.feedback.correct or question.feedback.general or ""


# ============================================================================
# Question-based Templates
# ============================================================================

def convert_to_mcq(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    questions = []
    for index, question in enumerate(content.questions):
        questions.append({
            "id": ctx.ids.allocate(question.id, f"q{index}"),
            "question": question.prompt or f"Question {index + 1}",
            "options": [option.text for option in question.options],
            "correctIndex": find_correct_index(question.options),
            "explanation": _explanation(question),
            "points": question.points or 1,
        })

    return build_document(TemplateType.MCQ, _first_slide_title(content), {"questions": questions}, ctx)


def _resolve_is_true(question: Question) -> bool:
    if question.correct_answer in ("true", "True"):
        return True
    correct = next((o for o in question.options if o.is_correct), None)
    return correct is not None and correct.text.strip().lower() == "true"


def convert_to_truefalse(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    items = []
    statements = [q for q in content.questions if is_truefalse_question(q)]
    for index, question in enumerate(statements):
        items.append({
            "id": ctx.ids.allocate(question.id, f"tf{index}"),
            "question": question.prompt or f"Statement {index + 1}",
            "isTrue": _resolve_is_true(question),
            "explanation": _explanation(question),
            "points": question.points or 1,
        })

    return build_document(TemplateType.TRUEFALSE, _first_slide_title(content), {"items": items}, ctx)


def _survey_item_type(question: Question) -> str:
    lowered = question.type.lower()
    if "rating" in lowered:
        return "rating"
    if "text" in lowered:
        return "text"
    return "multiple"


def convert_to_survey(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    questions = []
    for index, question in enumerate(content.questions):
        questions.append({
            "id": ctx.ids.allocate(question.id, f"sq{index}"),
            "question": question.prompt or f"Survey Question {index + 1}",
            "type": _survey_item_type(question),
            "options": [option.text for option in question.options],
            "required": True,
            "points": question.points or 1,
        })

    return build_document(
        TemplateType.SURVEY,
        _first_slide_title(content),
        {"questions": questions},
        ctx,
        show_feedback=False,
    )


def _pickmany_source(content: IntermediateContent) -> Optional[Question]:
    typed = next((q for q in content.questions if is_pickmany_question(q)), None)
    if typed is not None:
        return typed
    return next((q for q in content.questions if len(q.options) > PICKMANY_MIN_OPTIONS), None)


def convert_to_pickmany(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    source = _pickmany_source(content)

    if source is None:
        items = [{"id": ctx.ids.allocate(None, "item_0"), "text": "Option A", "isCorrect": True}]
        return build_document(
            TemplateType.PICKMANY,
            None,
            {"question": PICKMANY_PROMPT, "items": items},
            ctx,
        )

    items = []
    for index, option in enumerate(source.options):
        items.append({
            "id": ctx.ids.allocate(option.id, f"item_{index}"),
            "text": option.text,
            "isCorrect": option.is_correct,
        })

    return build_document(
        TemplateType.PICKMANY,
        source.prompt,
        {"question": source.prompt or PICKMANY_PROMPT, "items": items},
        ctx,
    )


# ============================================================================
# Slide-based Templates
# ============================================================================

def convert_to_flipcards(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    """Pair slides (0,1), (2,3), ...; the even slide is the front."""
    cards = []
    slides = content.slides
    for index in range(0, len(slides), 2):
        front_slide = slides[index]
        back_slide = slides[index + 1] if index + 1 < len(slides) else None

        if not front_slide.content.text:
            continue

        front = front_slide.content.text[0].value or front_slide.title
        if back_slide is not None and back_slide.content.text:
            back = back_slide.content.text[0].value
        else:
            back = FLIPCARD_BACK_PLACEHOLDER

        cards.append({
            "id": ctx.ids.allocate(None, f"card_{index}"),
            "front": front,
            "back": back,
        })

    return build_document(TemplateType.FLIPCARDS, _first_slide_title(content), {"cards": cards}, ctx)


def convert_to_dragdrop(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    pairs: List[Dict[str, Any]] = []

    for interaction in content.interactions:
        if not is_drag_interaction(interaction):
            continue
        n = len(pairs) + 1
        pairs.append({
            "id": ctx.ids.allocate(interaction.id, f"pair_{len(pairs)}"),
            "left": interaction.parameters.get("source") or interaction.target or f"Item {n}",
            "right": interaction.parameters.get("target") or interaction.trigger or f"Match {n}",
        })

    # No drag interactions: one pair per slide, from its first two text runs
    if not pairs:
        for slide in content.slides:
            runs = slide.content.text
            if len(runs) < 2:
                continue
            pairs.append({
                "id": ctx.ids.allocate(None, f"pair_{len(pairs)}"),
                "left": runs[0].value,
                "right": runs[1].value,
            })

    return build_document(TemplateType.DRAGDROP, _first_slide_title(content), {"pairs": pairs}, ctx)


def _diagram_image_url(content: IntermediateContent, slide: Slide) -> str:
    """
    First usable image source for a label diagram.

    Order: a sourced image on the diagram slide, then any sourced image in
    the manifest, then the first image file in the archive.
    """
    for image in slide.content.images:
        if image.src:
            return image.src
    for media in content.multimedia:
        if media.type == "image" and media.src:
            return media.src
    for name in content.files:
        if name.lower().endswith(IMAGE_EXTENSIONS):
            return name
    return ""


def convert_to_labeldiagram(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    slide = next(
        (s for s in content.slides if s.content.images and s.content.text),
        None,
    )

    if slide is None:
        return build_document(TemplateType.LABELDIAGRAM, None, {"imageUrl": "", "labels": []}, ctx)

    labels = []
    for index, run in enumerate(slide.content.text):
        default = 10 + index * 10
        labels.append({
            "id": ctx.ids.allocate(None, f"label_{index}"),
            "x": run.position.x if run.position.x is not None else default,
            "y": run.position.y if run.position.y is not None else default,
            "text": run.value,
            # Source carries no answer key; every extracted label is taken as correct
            "correct": True,
        })

    return build_document(
        TemplateType.LABELDIAGRAM,
        slide.title,
        {"imageUrl": _diagram_image_url(content, slide), "labels": labels},
        ctx,
    )


def convert_to_timeline(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    slides = [s for s in content.slides if s.type == "timeline" or s.content.text]

    events = []
    for index, slide in enumerate(slides):
        runs = slide.content.text
        events.append({
            "id": ctx.ids.allocate(slide.id, f"event_{index}"),
            "date": slide.title or f"Event {index + 1}",
            "title": slide.title or f"Timeline Event {index + 1}",
            "description": runs[0].value if runs else TIMELINE_DESCRIPTION_PLACEHOLDER,
            "position": index,
        })

    return build_document(TemplateType.TIMELINE, _first_slide_title(content), {"events": events}, ctx)


def convert_to_contentreveal(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    slides = [s for s in content.slides if s.type == "reveal" or s.content.text]

    panels = []
    for index, slide in enumerate(slides):
        panels.append({
            "id": ctx.ids.allocate(slide.id, f"panel_{index}"),
            "title": slide.title or f"Panel {index + 1}",
            "content": "\n".join(run.value for run in slide.content.text) or PANEL_CONTENT_PLACEHOLDER,
            "revealed": False,
        })

    return build_document(TemplateType.CONTENTREVEAL, _first_slide_title(content), {"panels": panels}, ctx)


# ============================================================================
# Package-reference Templates
# ============================================================================

def convert_to_gamearena(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    payload = {
        "packagePath": ctx.package_path,
        "instructions": PACKAGE_INSTRUCTIONS,
        "width": DEFAULT_PACKAGE_WIDTH,
        "height": GAMEARENA_HEIGHT,
    }
    return build_document(TemplateType.GAMEARENA, _first_slide_title(content), payload, ctx)


def convert_to_scormviewer(content: IntermediateContent, ctx: ConversionContext) -> Dict[str, Any]:
    payload = {
        "scormUrl": f"{ctx.package_path}/index.html",
        "width": DEFAULT_PACKAGE_WIDTH,
        "height": SCORMVIEWER_HEIGHT,
    }
    return build_document(TemplateType.SCORMVIEWER, _first_slide_title(content), payload, ctx)


# ============================================================================
# Dispatch
# ============================================================================

Converter = Callable[[IntermediateContent, ConversionContext], Dict[str, Any]]

CONVERTERS: Dict[TemplateType, Converter] = {
    TemplateType.MCQ: convert_to_mcq,
    TemplateType.TRUEFALSE: convert_to_truefalse,
    TemplateType.FLIPCARDS: convert_to_flipcards,
    TemplateType.DRAGDROP: convert_to_dragdrop,
    TemplateType.LABELDIAGRAM: convert_to_labeldiagram,
    TemplateType.TIMELINE: convert_to_timeline,
    TemplateType.CONTENTREVEAL: convert_to_contentreveal,
    TemplateType.SURVEY: convert_to_survey,
    TemplateType.PICKMANY: convert_to_pickmany,
    TemplateType.GAMEARENA: convert_to_gamearena,
    TemplateType.SCORMVIEWER: convert_to_scormviewer,
}


def convert_to_template(
    content: IntermediateContent,
    template_type: TemplateType,
    now: Optional[datetime] = None,
    package_root: str = DEFAULT_PACKAGE_ROOT,
    package_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the native activity document for template_type.

    Args:
        content: Extracted intermediate content
        template_type: Type chosen by the classifier (or forced by the caller)
        now: Timestamp for createdAt/updatedAt (defaults to current UTC time)
        package_root: Directory prefix for package-reference payloads
        package_name: Sub-directory for this package's extracted assets

    Returns:
        JSON-serialisable document dict
    """
    ctx = ConversionContext(package_root=package_root, package_name=package_name)
    if now is not None:
        ctx.now = now

    converter = CONVERTERS.get(TemplateType(template_type), convert_to_scormviewer)
    return converter(content, ctx)
