#!/usr/bin/env python3
"""
Tests for template type detection.
"""

import pytest

from storyimport.classifier import detect_template_type
from storyimport.config import ClassifierThresholds
from storyimport.models import (
    ImageRef,
    IntermediateContent,
    Interaction,
    Option,
    Question,
    Slide,
    SlideContent,
    TemplateType,
    TextRun,
)


def runs(*values):
    return [TextRun(id=None, value=v) for v in values]


def slide(texts=(), slide_type="standard", images=0, slide_id="s"):
    content = SlideContent(
        text=runs(*texts),
        images=[ImageRef(id=None, src=f"img{i}.png") for i in range(images)],
    )
    return Slide(id=slide_id, title="Slide", type=slide_type, content=content)


def question(qtype="multiplechoice", options=2):
    return Question(
        id=None,
        type=qtype,
        prompt="Q",
        options=[Option(id=None, text=str(i)) for i in range(options)],
    )


def interaction(action=None):
    return Interaction(id=None, type="trigger", action=action)


class TestRules:
    def test_empty_model_is_scormviewer(self):
        assert detect_template_type(IntermediateContent()) == TemplateType.SCORMVIEWER

    def test_plain_questions_are_mcq(self):
        content = IntermediateContent(questions=[question()])
        assert detect_template_type(content) == TemplateType.MCQ

    def test_truefalse_wins_over_pickmany(self):
        content = IntermediateContent(questions=[question("pickMany"), question("TrueFalse")])
        assert detect_template_type(content) == TemplateType.TRUEFALSE

    def test_pickmany(self):
        content = IntermediateContent(questions=[question("multipleselect")])
        assert detect_template_type(content) == TemplateType.PICKMANY

    def test_flipcards(self):
        content = IntermediateContent(slides=[slide(["Front", "Back"])])
        assert detect_template_type(content) == TemplateType.FLIPCARDS

    def test_long_text_is_not_a_flipcard(self):
        content = IntermediateContent(slides=[slide(["x" * 200, "short"])])
        assert detect_template_type(content) == TemplateType.SCORMVIEWER

    def test_dragdrop(self):
        content = IntermediateContent(interactions=[interaction("DragItem")])
        assert detect_template_type(content) == TemplateType.DRAGDROP

    def test_labeldiagram(self):
        content = IntermediateContent(slides=[slide(["Label"], images=1)])
        assert detect_template_type(content) == TemplateType.LABELDIAGRAM

    def test_timeline_needs_more_than_five_runs(self):
        five = IntermediateContent(slides=[slide(["e"] * 5 + ["x" * 300], slide_type="timeline")])
        assert detect_template_type(five) == TemplateType.TIMELINE

        too_few = IntermediateContent(slides=[slide(["x" * 300] * 5, slide_type="timeline")])
        assert detect_template_type(too_few) == TemplateType.SCORMVIEWER

    def test_contentreveal(self):
        content = IntermediateContent(slides=[slide(["x" * 300] * 4, slide_type="reveal")])
        assert detect_template_type(content) == TemplateType.CONTENTREVEAL

    def test_survey(self):
        content = IntermediateContent(interactions=[interaction("openPoll")])
        assert detect_template_type(content) == TemplateType.SURVEY

    def test_gamearena(self):
        slides = [slide(slide_id=f"s{i}") for i in range(6)]
        content = IntermediateContent(slides=slides, interactions=[interaction("jump")])
        assert detect_template_type(content) == TemplateType.GAMEARENA

    def test_five_slides_is_not_enough_for_gamearena(self):
        slides = [slide(slide_id=f"s{i}") for i in range(5)]
        content = IntermediateContent(slides=slides, interactions=[interaction("jump")])
        assert detect_template_type(content) == TemplateType.SCORMVIEWER


class TestPriority:
    def test_questions_beat_everything(self):
        content = IntermediateContent(
            slides=[slide(["Front", "Back"])],
            interactions=[interaction("drag")],
            questions=[question()],
        )
        assert detect_template_type(content) == TemplateType.MCQ

    def test_flipcards_beat_dragdrop(self):
        content = IntermediateContent(
            slides=[slide(["Front", "Back"])],
            interactions=[interaction("drag")],
        )
        assert detect_template_type(content) == TemplateType.FLIPCARDS

    def test_dragdrop_beats_survey(self):
        content = IntermediateContent(interactions=[interaction("survey"), interaction("drag")])
        assert detect_template_type(content) == TemplateType.DRAGDROP


class TestThresholdsAndDeterminism:
    def test_custom_thresholds(self):
        content = IntermediateContent(slides=[slide(["a", "b", "c"])])
        strict = ClassifierThresholds(flipcard_min_text_runs=4)
        assert detect_template_type(content) == TemplateType.FLIPCARDS
        assert detect_template_type(content, strict) == TemplateType.SCORMVIEWER

    @pytest.mark.parametrize("attempt", range(3))
    def test_same_input_same_answer(self, attempt):
        content = IntermediateContent(
            slides=[slide(["Label"], images=1)],
            interactions=[interaction("poll")],
        )
        assert detect_template_type(content) == TemplateType.LABELDIAGRAM
