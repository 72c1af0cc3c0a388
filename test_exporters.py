#!/usr/bin/env python3
"""
Tests for document export formats.
"""

import csv
import io
import json
from xml.etree import ElementTree as ET

import pytest
import yaml

from storyimport.errors import UnsupportedExportFormat
from storyimport.exporters import export_document
from storyimport.models import TemplateType


MCQ_DOCUMENT = {
    "metadata": {"id": "mcq_1", "title": "Quiz", "template": "mcq"},
    "config": {"timeLimit": 0, "allowRetakes": True, "showFeedback": True},
    "questions": [
        {"id": "q1", "question": "2 + 2?", "options": ["3", "4"], "correctIndex": 1},
        {"id": "q2", "question": "Pick", "options": ["a", "b", "c", "d", "e"], "correctIndex": -1},
    ],
}


def csv_rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_json_round_trips_structure():
    assert json.loads(export_document(MCQ_DOCUMENT, TemplateType.MCQ, "json")) == MCQ_DOCUMENT


def test_yaml_is_safe_loadable():
    assert yaml.safe_load(export_document(MCQ_DOCUMENT, TemplateType.MCQ, "yaml")) == MCQ_DOCUMENT


def test_xml_structure():
    text = export_document(MCQ_DOCUMENT, TemplateType.MCQ, "xml")
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')

    root = ET.fromstring(text.split("\n", 1)[1])
    assert root.tag == "activity"
    assert root.get("template") == "mcq"
    assert root.findtext("convertedFromStoryline") == "true"
    assert root.findtext("config/allowRetakes") == "true"
    assert [e.text for e in root.findall("questions/item/options/item")][:2] == ["3", "4"]


def test_mcq_csv_widens_for_extra_options():
    rows = csv_rows(export_document(MCQ_DOCUMENT, TemplateType.MCQ, "csv"))
    assert rows[0] == ["Question", "Option A", "Option B", "Option C", "Option D", "Option E", "Correct Answer"]
    assert rows[1] == ["2 + 2?", "3", "4", "", "", "", "2"]
    # No correct option recorded
    assert rows[2][-1] == ""


def test_flipcards_csv():
    document = {"cards": [{"front": "Hello", "back": "World"}]}
    rows = csv_rows(export_document(document, TemplateType.FLIPCARDS, "csv"))
    assert rows == [["Front", "Back"], ["Hello", "World"]]


def test_csv_notice_for_untabular_types():
    assert export_document({}, TemplateType.SCORMVIEWER, "csv") == "Data exported in native format\n"


def test_format_is_case_insensitive():
    assert export_document(MCQ_DOCUMENT, TemplateType.MCQ, "JSON").startswith("{")


def test_unknown_format():
    with pytest.raises(UnsupportedExportFormat):
        export_document(MCQ_DOCUMENT, TemplateType.MCQ, "pdf")
