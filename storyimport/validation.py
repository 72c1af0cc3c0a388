#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

validation.py

Required-field checks and shape normalisation for native activity documents.

validate() only reports; it never raises and never edits the document.
optimize() returns a normalised copy: list fields default to [], boolean
flags are coerced, and per-type item defaults are filled in.

An mcq question with correctIndex == -1 is valid (it records that the
source marked no option correct). A question with no options list is not.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from storyimport.errors import ValidationError
from storyimport.models import TemplateType, ValidationResult


REQUIRED_FIELDS: Dict[TemplateType, List[str]] = {
    TemplateType.MCQ: ["questions"],
    TemplateType.TRUEFALSE: ["items"],
    TemplateType.FLIPCARDS: ["cards"],
    TemplateType.DRAGDROP: ["pairs"],
    TemplateType.LABELDIAGRAM: ["imageUrl", "labels"],
    TemplateType.TIMELINE: ["events"],
    TemplateType.CONTENTREVEAL: ["panels"],
    TemplateType.SURVEY: ["questions"],
    TemplateType.PICKMANY: ["question", "items"],
    TemplateType.GAMEARENA: ["packagePath"],
    TemplateType.SCORMVIEWER: ["scormUrl"],
}

ENVELOPE_FIELDS = ["metadata", "config"]

# The list-valued payload field of each type
ARRAY_FIELDS: Dict[TemplateType, str] = {
    TemplateType.MCQ: "questions",
    TemplateType.TRUEFALSE: "items",
    TemplateType.FLIPCARDS: "cards",
    TemplateType.DRAGDROP: "pairs",
    TemplateType.LABELDIAGRAM: "labels",
    TemplateType.TIMELINE: "events",
    TemplateType.CONTENTREVEAL: "panels",
    TemplateType.SURVEY: "questions",
    TemplateType.PICKMANY: "items",
}

CONFIG_DEFAULTS = {
    "timeLimit": 0,
    "allowRetakes": True,
    "showFeedback": True,
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}


def _is_missing(document: Dict[str, Any], name: str) -> bool:
    value = document.get(name)
    return value is None or value == ""


# ============================================================================
# Validation
# ============================================================================

def _validate_mcq_questions(questions: Any) -> List[str]:
    errors = []
    if not isinstance(questions, list):
        return ["Field questions must be a list"]

    for index, question in enumerate(questions):
        if not isinstance(question, dict):
            errors.append(f"questions[{index}] is not an object")
            continue

        options = question.get("options")
        if not isinstance(options, list):
            errors.append(f"questions[{index}] is missing required field: options")
            continue

        correct_index = question.get("correctIndex")
        if isinstance(correct_index, int) and not isinstance(correct_index, bool):
            if correct_index != -1 and not 0 <= correct_index < len(options):
                errors.append(
                    f"questions[{index}].correctIndex {correct_index} is out of range "
                    f"for {len(options)} options"
                )

    return errors


def validate(document: Any, template_type: TemplateType) -> ValidationResult:
    """
    Check a converted document against its type's required fields.

    Returns:
        ValidationResult listing every problem found (empty when valid)
    """
    if not isinstance(document, dict):
        return ValidationResult(valid=False, errors=["Document is not an object"])

    try:
        template_type = TemplateType(template_type)
    except ValueError:
        return ValidationResult(valid=False, errors=[f"Unknown template type: {template_type}"])

    errors = []
    for name in ENVELOPE_FIELDS + REQUIRED_FIELDS[template_type]:
        if _is_missing(document, name):
            errors.append(f"Missing required field: {name}")

    metadata = document.get("metadata")
    if isinstance(metadata, dict):
        declared = metadata.get("template")
        if declared and declared != template_type.value:
            errors.append(
                f"metadata.template is '{declared}' but document was validated as '{template_type.value}'"
            )

    array_field = ARRAY_FIELDS.get(template_type)
    if array_field and not _is_missing(document, array_field):
        if not isinstance(document[array_field], list):
            errors.append(f"Field {array_field} must be a list")
        elif template_type == TemplateType.MCQ:
            errors.extend(_validate_mcq_questions(document[array_field]))

    return ValidationResult(valid=not errors, errors=errors)


def ensure_valid(document: Dict[str, Any], template_type: TemplateType) -> Dict[str, Any]:
    """
    Strict variant of validate().

    Raises:
        ValidationError: Document has required-field gaps
    """
    result = validate(document, template_type)
    if not result.valid:
        raise ValidationError(
            f"Converted {TemplateType(template_type).value} document failed validation",
            errors=result.errors,
            context={"errors": result.errors},
        )
    return document


# ============================================================================
# Optimisation
# ============================================================================

def coerce_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _dict_items(values: List[Any]) -> List[Dict[str, Any]]:
    return [v for v in values if isinstance(v, dict)]


def _optimize_mcq(doc: Dict[str, Any]) -> None:
    for question in _dict_items(doc["questions"]):
        if question.get("options") is None:
            question["options"] = []
        # -1 is a computed "no correct option" marker and must survive
        if "correctIndex" not in question:
            question["correctIndex"] = 0


def _optimize_truefalse(doc: Dict[str, Any]) -> None:
    for item in _dict_items(doc["items"]):
        item["isTrue"] = coerce_bool(item.get("isTrue"))


def _optimize_flipcards(doc: Dict[str, Any]) -> None:
    for card in _dict_items(doc["cards"]):
        card["front"] = card.get("front") or "Front"
        card["back"] = card.get("back") or "Back"


def _optimize_dragdrop(doc: Dict[str, Any]) -> None:
    for pair in _dict_items(doc["pairs"]):
        pair["left"] = pair.get("left") or "Item"
        pair["right"] = pair.get("right") or "Match"


def _optimize_labeldiagram(doc: Dict[str, Any]) -> None:
    if doc.get("imageUrl") is None:
        doc["imageUrl"] = ""
    for label in _dict_items(doc["labels"]):
        label["correct"] = coerce_bool(label.get("correct"))


def _optimize_contentreveal(doc: Dict[str, Any]) -> None:
    for panel in _dict_items(doc["panels"]):
        panel["revealed"] = coerce_bool(panel.get("revealed"))


def _optimize_survey(doc: Dict[str, Any]) -> None:
    for question in _dict_items(doc["questions"]):
        if question.get("options") is None:
            question["options"] = []
        question["required"] = coerce_bool(question.get("required"), default=True)


def _optimize_pickmany(doc: Dict[str, Any]) -> None:
    for item in _dict_items(doc["items"]):
        item["isCorrect"] = coerce_bool(item.get("isCorrect"))


_TYPE_OPTIMIZERS = {
    TemplateType.MCQ: _optimize_mcq,
    TemplateType.TRUEFALSE: _optimize_truefalse,
    TemplateType.FLIPCARDS: _optimize_flipcards,
    TemplateType.DRAGDROP: _optimize_dragdrop,
    TemplateType.LABELDIAGRAM: _optimize_labeldiagram,
    TemplateType.CONTENTREVEAL: _optimize_contentreveal,
    TemplateType.SURVEY: _optimize_survey,
    TemplateType.PICKMANY: _optimize_pickmany,
}


def optimize(document: Dict[str, Any], template_type: TemplateType) -> Dict[str, Any]:
    """
    Return a normalised copy of a converted document.

    The input is left untouched.
    """
    template_type = TemplateType(template_type)
    doc = copy.deepcopy(document)

    config: Optional[Dict[str, Any]] = doc.get("config")
    if not isinstance(config, dict):
        config = {}
        doc["config"] = config
    config.setdefault("timeLimit", CONFIG_DEFAULTS["timeLimit"])
    config["allowRetakes"] = coerce_bool(config.get("allowRetakes"), CONFIG_DEFAULTS["allowRetakes"])
    config["showFeedback"] = coerce_bool(config.get("showFeedback"), CONFIG_DEFAULTS["showFeedback"])

    array_field = ARRAY_FIELDS.get(template_type)
    if array_field and not isinstance(doc.get(array_field), list):
        doc[array_field] = []

    optimizer = _TYPE_OPTIMIZERS.get(template_type)
    if optimizer is not None:
        optimizer(doc)

    return doc
