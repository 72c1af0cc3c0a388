#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

exporters.py

Serialise native activity documents for download.

Formats:
- json: the document as-is, indented
- yaml: same structure, block style
- xml:  recursive element tree under <activity template="...">
- csv:  one row per question/card/pair/event/item where the type has a
        natural tabular shape; other types get a one-line notice
"""

from __future__ import annotations

import csv
import io
import json
import re
import string
from typing import Any, Callable, Dict, List
from xml.etree import ElementTree as ET

import yaml

from storyimport.errors import UnsupportedExportFormat
from storyimport.models import TemplateType


EXPORT_FORMATS = ("json", "xml", "csv", "yaml")

CSV_NOTICE = "Data exported in native format"
MIN_MCQ_OPTION_COLUMNS = 4


# ============================================================================
# JSON / YAML
# ============================================================================

def to_json(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False, default=str)


def to_yaml(document: Dict[str, Any]) -> str:
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)


# ============================================================================
# XML
# ============================================================================

def _xml_tag(name: str) -> str:
    tag = re.sub(r"[^A-Za-z0-9_.-]", "_", str(name)) or "field"
    if not (tag[0].isalpha() or tag[0] == "_"):
        tag = f"_{tag}"
    return tag


def _xml_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _append_xml(parent: ET.Element, name: str, value: Any) -> None:
    elem = ET.SubElement(parent, _xml_tag(name))
    if isinstance(value, dict):
        for key, child in value.items():
            _append_xml(elem, key, child)
    elif isinstance(value, (list, tuple)):
        for child in value:
            _append_xml(elem, "item", child)
    else:
        elem.text = _xml_text(value)


def to_xml(document: Dict[str, Any]) -> str:
    metadata = document.get("metadata") or {}
    root = ET.Element("activity", {"template": str(metadata.get("template", "unknown"))})
    ET.SubElement(root, "convertedFromStoryline").text = "true"

    for key, value in document.items():
        _append_xml(root, key, value)

    ET.indent(root, space="    ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


# ============================================================================
# CSV
# ============================================================================

def _option_letters(count: int) -> List[str]:
    letters = string.ascii_uppercase
    return [letters[i] if i < len(letters) else str(i + 1) for i in range(count)]


def _mcq_rows(document: Dict[str, Any]) -> List[List[Any]]:
    questions = document.get("questions") or []
    width = max([MIN_MCQ_OPTION_COLUMNS] + [len(q.get("options") or []) for q in questions])

    rows: List[List[Any]] = [
        ["Question"] + [f"Option {letter}" for letter in _option_letters(width)] + ["Correct Answer"]
    ]
    for q in questions:
        options = list(q.get("options") or [])
        options += [""] * (width - len(options))
        correct_index = q.get("correctIndex")
        # -1 means no option was marked correct; leave the column blank
        correct = correct_index + 1 if isinstance(correct_index, int) and correct_index >= 0 else ""
        rows.append([q.get("question", "")] + options + [correct])
    return rows


def _truefalse_rows(document: Dict[str, Any]) -> List[List[Any]]:
    rows: List[List[Any]] = [["Statement", "True", "False", "Correct Answer"]]
    for item in document.get("items") or []:
        rows.append([item.get("question", ""), "True", "False", "True" if item.get("isTrue") else "False"])
    return rows


def _flipcards_rows(document: Dict[str, Any]) -> List[List[Any]]:
    rows: List[List[Any]] = [["Front", "Back"]]
    for card in document.get("cards") or []:
        rows.append([card.get("front", ""), card.get("back", "")])
    return rows


def _dragdrop_rows(document: Dict[str, Any]) -> List[List[Any]]:
    rows: List[List[Any]] = [["Left", "Right"]]
    for pair in document.get("pairs") or []:
        rows.append([pair.get("left", ""), pair.get("right", "")])
    return rows


def _timeline_rows(document: Dict[str, Any]) -> List[List[Any]]:
    rows: List[List[Any]] = [["Position", "Date", "Title", "Description"]]
    for event in document.get("events") or []:
        rows.append([event.get("position", ""), event.get("date", ""), event.get("title", ""),
                     event.get("description", "")])
    return rows


def _pickmany_rows(document: Dict[str, Any]) -> List[List[Any]]:
    question = document.get("question", "")
    rows: List[List[Any]] = [["Question", "Item", "Correct"]]
    for item in document.get("items") or []:
        rows.append([question, item.get("text", ""), "True" if item.get("isCorrect") else "False"])
    return rows


_CSV_BUILDERS: Dict[TemplateType, Callable[[Dict[str, Any]], List[List[Any]]]] = {
    TemplateType.MCQ: _mcq_rows,
    TemplateType.TRUEFALSE: _truefalse_rows,
    TemplateType.FLIPCARDS: _flipcards_rows,
    TemplateType.DRAGDROP: _dragdrop_rows,
    TemplateType.TIMELINE: _timeline_rows,
    TemplateType.PICKMANY: _pickmany_rows,
}


def to_csv(document: Dict[str, Any], template_type: TemplateType) -> str:
    builder = _CSV_BUILDERS.get(TemplateType(template_type))
    if builder is None:
        return f"{CSV_NOTICE}\n"

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(builder(document))
    return buffer.getvalue()


# ============================================================================
# Dispatch
# ============================================================================

def export_document(document: Dict[str, Any], template_type: TemplateType, fmt: str = "json") -> str:
    """
    Serialise a converted document.

    Raises:
        UnsupportedExportFormat: fmt is not one of EXPORT_FORMATS
    """
    fmt = (fmt or "").lower()
    if fmt == "json":
        return to_json(document)
    if fmt == "yaml":
        return to_yaml(document)
    if fmt == "xml":
        return to_xml(document)
    if fmt == "csv":
        return to_csv(document, template_type)

    raise UnsupportedExportFormat(
        f"Unsupported export format: {fmt}",
        suggestion=f"Use one of: {', '.join(EXPORT_FORMATS)}",
    )
