#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

classifier.py

Pick one native template type for an intermediate content model.

Rules run in priority order and the first match wins:
  1. Any questions        -> truefalse / pickmany / mcq (by question type)
  2. Short text pairs     -> flipcards
  3. Drag interactions    -> dragdrop
  4. Image + text slide   -> labeldiagram
  5. Long timeline slide  -> timeline
  6. Reveal slide         -> contentreveal
  7. Survey/poll actions  -> survey
  8. Many interactive
     slides               -> gamearena
  9. Anything else        -> scormviewer

The function is pure and total: no clock, no randomness, and every input
(including an empty model) ends in a type.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from storyimport.config import DEFAULT_THRESHOLDS, ClassifierThresholds
from storyimport.models import Interaction, IntermediateContent, Question, Slide, TemplateType


TRUEFALSE_MARKERS = ("truefalse", "true_false")
PICKMANY_MARKERS = ("pickmany", "pick_many", "multipleselect")
DRAG_MARKERS = ("drag",)
SURVEY_MARKERS = ("survey", "poll")

TIMELINE_SLIDE_TYPE = "timeline"
REVEAL_SLIDE_TYPE = "reveal"


def _contains_any(value: Optional[str], markers: Tuple[str, ...]) -> bool:
    if not value:
        return False
    lowered = value.lower()
    return any(marker in lowered for marker in markers)


def is_truefalse_question(question: Question) -> bool:
    return _contains_any(question.type, TRUEFALSE_MARKERS)


def is_pickmany_question(question: Question) -> bool:
    return _contains_any(question.type, PICKMANY_MARKERS)


def is_drag_interaction(interaction: Interaction) -> bool:
    return _contains_any(interaction.action, DRAG_MARKERS)


def is_survey_interaction(interaction: Interaction) -> bool:
    return _contains_any(interaction.action, SURVEY_MARKERS)


# ============================================================================
# Slide Heuristics
# ============================================================================

def is_flipcard_slide(slide: Slide, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS) -> bool:
    runs = slide.content.text
    if not thresholds.flipcard_min_text_runs <= len(runs) <= thresholds.flipcard_max_text_runs:
        return False
    return all(len(run.value) < thresholds.flipcard_max_text_length for run in runs)


def is_label_slide(slide: Slide) -> bool:
    return len(slide.content.images) > 0 and len(slide.content.text) > 0


def is_timeline_slide(slide: Slide, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS) -> bool:
    return (
        len(slide.content.text) > thresholds.timeline_min_text_runs
        and slide.type == TIMELINE_SLIDE_TYPE
    )


def is_reveal_slide(slide: Slide, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS) -> bool:
    return (
        len(slide.content.text) > thresholds.reveal_min_text_runs
        and slide.type == REVEAL_SLIDE_TYPE
    )


# ============================================================================
# Rule Chain
# ============================================================================

def _question_rule(content: IntermediateContent, thresholds: ClassifierThresholds) -> Optional[TemplateType]:
    if not content.questions:
        return None
    if any(is_truefalse_question(q) for q in content.questions):
        return TemplateType.TRUEFALSE
    if any(is_pickmany_question(q) for q in content.questions):
        return TemplateType.PICKMANY
    return TemplateType.MCQ


def _flipcards_rule(content, thresholds):
    if any(is_flipcard_slide(s, thresholds) for s in content.slides):
        return TemplateType.FLIPCARDS
    return None


def _dragdrop_rule(content, thresholds):
    if any(is_drag_interaction(i) for i in content.interactions):
        return TemplateType.DRAGDROP
    return None


def _labeldiagram_rule(content, thresholds):
    if any(is_label_slide(s) for s in content.slides):
        return TemplateType.LABELDIAGRAM
    return None


def _timeline_rule(content, thresholds):
    if any(is_timeline_slide(s, thresholds) for s in content.slides):
        return TemplateType.TIMELINE
    return None


def _contentreveal_rule(content, thresholds):
    if any(is_reveal_slide(s, thresholds) for s in content.slides):
        return TemplateType.CONTENTREVEAL
    return None


def _survey_rule(content, thresholds):
    if any(is_survey_interaction(i) for i in content.interactions):
        return TemplateType.SURVEY
    return None


def _gamearena_rule(content, thresholds):
    # Equivalent to analysis.has_interactions / analysis.slide_count
    has_interactions = len(content.interactions) > 0
    if has_interactions and len(content.slides) > thresholds.gamearena_min_slides:
        return TemplateType.GAMEARENA
    return None


Rule = Callable[[IntermediateContent, ClassifierThresholds], Optional[TemplateType]]

# Order is significant
RULES: List[Rule] = [
    _question_rule,
    _flipcards_rule,
    _dragdrop_rule,
    _labeldiagram_rule,
    _timeline_rule,
    _contentreveal_rule,
    _survey_rule,
    _gamearena_rule,
]

FALLBACK_TYPE = TemplateType.SCORMVIEWER


def detect_template_type(
    content: IntermediateContent,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> TemplateType:
    """
    Classify a content model into exactly one template type.

    Args:
        content: Extracted intermediate content
        thresholds: Heuristic cut-offs (defaults from config)

    Returns:
        The first matching rule's type, or scormviewer
    """
    for rule in RULES:
        template_type = rule(content, thresholds)
        if template_type is not None:
            return template_type
    return FALLBACK_TYPE
