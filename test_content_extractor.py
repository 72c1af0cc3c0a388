#!/usr/bin/env python3
"""
Tests for manifest parsing and the intermediate content model.
"""

import pytest

from storyimport.errors import XmlParseError
from storyimport.extractor import extract_content, get_attr, parse_story_xml
from storyimport.text_utils import clean_text


RICH_STORY = """<?xml version="1.0" encoding="UTF-8"?>
<sl:story xmlns:sl="http://example.com/storyline">
  <sl:slide id="intro" name="Welcome" type="reveal" duration="30">
    <sl:text id="t1" x="15" y="40" format="bold">Hello</sl:text>
    <sl:text id="t2"><![CDATA[<p>First</p><p>Second <b>line</b></p>]]></sl:text>
    <sl:image id="img1" src="media/map.png" alt="Map" x="0" y="0"/>
    <sl:video id="v1" src="media/clip.mp4" duration="12"/>
  </sl:slide>
  <Slide title="Untitled fallback">
    <Audio src="media/voice.mp3"/>
  </Slide>
  <sl:trigger id="tr1" trigger="click" action="jumpToSlide" target="intro"/>
  <sl:quiz id="quiz1">
    <sl:question id="q1" type="truefalse" points="3">
      <sl:prompt>The sky is blue</sl:prompt>
      <sl:option correct="true">True</sl:option>
      <sl:option>False</sl:option>
      <sl:correctFeedback>Right</sl:correctFeedback>
    </sl:question>
    <sl:question id="q2" points="0">Pick one
      <sl:option iscorrect="TRUE">A</sl:option>
    </sl:question>
  </sl:quiz>
</sl:story>
"""


class TestParse:
    def test_malformed_xml(self):
        with pytest.raises(XmlParseError):
            parse_story_xml("<story><slide></story>")

    def test_entity_expansion_is_rejected(self):
        bomb = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE story [<!ENTITY a "aaaaaaaaaa"><!ENTITY b "&a;&a;&a;&a;">]>'
            "<story>&b;</story>"
        )
        with pytest.raises(XmlParseError):
            parse_story_xml(bomb)

    def test_get_attr_skips_empty_values(self):
        elem = parse_story_xml('<slide name="" Title="Fallback"/>')
        assert get_attr(elem, "name", "title") == "Fallback"
        assert get_attr(elem, "missing") is None


class TestExtractContent:
    @pytest.fixture
    def content(self):
        return extract_content(RICH_STORY, ["story.xml", "media/map.png"])

    def test_no_manifest_gives_empty_model(self):
        content = extract_content(None, ["readme.txt"])
        assert content.files == ["readme.txt"]
        assert content.slides == []
        assert content.interactions == []
        assert content.questions == []
        assert content.multimedia == []
        assert content.analysis.slide_count == 0

    def test_whitespace_manifest_is_treated_as_missing(self):
        assert extract_content("   \n").slides == []

    def test_slides_match_any_case_and_namespace(self, content):
        assert [s.id for s in content.slides] == ["intro", "slide_1"]
        assert content.slides[0].title == "Welcome"
        assert content.slides[0].type == "reveal"
        assert content.slides[0].duration == "30"
        assert content.slides[1].title == "Untitled fallback"
        assert content.slides[1].type == "standard"

    def test_slide_content(self, content):
        intro = content.slides[0].content
        assert [run.value for run in intro.text] == ["Hello", "First\nSecond line"]
        assert intro.text[0].position.x == 15.0
        assert intro.text[0].format == "bold"
        assert intro.text[1].position.x is None
        assert intro.images[0].src == "media/map.png"
        assert intro.videos[0].duration == "12"
        assert content.slides[1].content.audio[0].src == "media/voice.mp3"

    def test_interactions_in_document_order(self, content):
        assert [i.type for i in content.interactions] == ["trigger", "quiz", "question", "question"]
        trigger = content.interactions[0]
        assert trigger.action == "jumpToSlide"
        assert trigger.parameters["target"] == "intro"

    def test_quiz_wrapper_is_also_a_question(self, content):
        assert [q.id for q in content.questions] == ["quiz1", "q1", "q2"]
        assert [o.text for o in content.questions[0].options] == ["True", "False", "A"]

    def test_question_fields(self, content):
        _, q1, q2 = content.questions
        assert q1.type == "truefalse"
        assert q1.prompt == "The sky is blue"
        assert [o.text for o in q1.options] == ["True", "False"]
        assert q1.options[0].is_correct
        assert q1.points == 3
        assert q1.feedback.correct == "Right"

        assert q2.type == "multiplechoice"
        assert q2.prompt == "Pick one"
        assert q2.options[0].is_correct
        assert q2.points == 1

    def test_multimedia(self, content):
        assert [(m.type, m.src) for m in content.multimedia] == [
            ("image", "media/map.png"),
            ("video", "media/clip.mp4"),
            ("audio", "media/voice.mp3"),
        ]

    def test_analysis(self, content):
        analysis = content.analysis
        assert analysis.has_quiz
        assert analysis.has_interactions
        assert analysis.slide_count == 2
        assert analysis.question_count == 3
        assert analysis.media_count == 3

    def test_to_dict_uses_camel_case(self, content):
        data = content.to_dict()
        assert data["storyXml"] == RICH_STORY
        assert data["analysis"]["hasQuiz"] is True
        assert data["questions"][1]["options"][0]["isCorrect"] is True


class TestCleanText:
    def test_plain_text_is_trimmed(self):
        assert clean_text("  hi  ") == "hi"

    def test_markup_is_flattened(self):
        assert clean_text("<p>Hello <b>world</b></p>") == "Hello world"

    def test_line_breaks(self):
        assert clean_text("one<br/>two") == "one\ntwo"

    def test_none(self):
        assert clean_text(None) == ""

    def test_literal_tag_text_is_kept(self):
        assert clean_text("<p>") == "<p>"
        assert clean_text("Press <Enter> key") == "Press <Enter> key"
        assert clean_text("Use <p> to start a paragraph") == "Use <p> to start a paragraph"
        assert clean_text("if a < b and c > d") == "if a < b and c > d"


class TestEdgeCases:
    def test_escaped_markup_in_options_survives(self):
        story = (
            '<story><question id="html" prompt="Which tag starts a paragraph?">'
            '<option correct="true">&lt;p&gt;</option>'
            "<option>&lt;div&gt;</option>"
            "<option>Press &lt;Enter&gt; key</option>"
            "</question></story>"
        )
        question = extract_content(story).questions[0]
        assert [o.text for o in question.options] == ["<p>", "<div>", "Press <Enter> key"]
        assert question.options[0].is_correct

    def test_escaped_rich_text_run_is_flattened(self):
        story = "<story><slide><text>&lt;p&gt;Hello &lt;b&gt;there&lt;/b&gt;&lt;/p&gt;</text></slide></story>"
        assert extract_content(story).slides[0].content.text[0].value == "Hello there"

    def test_wrapping_quiz_feeds_both_lists(self):
        story = (
            '<story><quiz id="z"><question id="q1" prompt="?">'
            '<option correct="true">yes</option><option>no</option>'
            "</question></quiz></story>"
        )
        content = extract_content(story)
        assert [q.id for q in content.questions] == ["z", "q1"]
        assert [i.id for i in content.interactions] == ["z", "q1"]
        assert content.analysis.question_count == 2

    def test_non_finite_coordinates_are_dropped(self):
        story = '<story><slide><text x="nan" y="inf" width="-inf" height="12px">T</text></slide></story>'
        position = extract_content(story).slides[0].content.text[0].position
        assert position.x is None
        assert position.y is None
        assert position.width is None
        assert position.height == 12.0
