#!/usr/bin/env python3
"""
Tests for archive sniffing, opening and manifest lookup.
"""

import pytest

from conftest import build_zip
from storyimport.archive import (
    find_manifest,
    is_safe_member_name,
    is_storyline_file,
    load_archive,
    open_archive,
)
from storyimport.errors import InvalidArchive


class TestIsStorylineFile:
    def test_story_extension(self):
        assert is_storyline_file("Course.story", "")

    def test_zip_extension_any_case(self):
        assert is_storyline_file("COURSE.ZIP", None)

    def test_mime_type_alone_is_enough(self):
        assert is_storyline_file("upload.bin", "application/zip")
        assert is_storyline_file("upload", "application/octet-stream")

    def test_rejects_plain_documents(self):
        assert not is_storyline_file("notes.pdf", "application/pdf")
        assert not is_storyline_file("", "")


class TestMemberNames:
    @pytest.mark.parametrize("name", ["story.xml", "story_content/model.xml", "media/a b.mp4"])
    def test_safe(self, name):
        assert is_safe_member_name(name)

    @pytest.mark.parametrize("name", ["/etc/passwd", "..\\evil.xml", "a/../../b", "C:/x.xml", "bad<name>", ""])
    def test_unsafe(self, name):
        assert not is_safe_member_name(name)


class TestLoadArchive:
    def test_root_manifest(self, make_package):
        contents = load_archive(make_package("<story/>"))
        assert contents.manifest_path == "story.xml"
        assert contents.manifest_text == "<story/>"

    def test_manifest_priority(self):
        data = build_zip({
            "course.xml": "<course/>",
            "story_content/model.xml": "<model/>",
        })
        contents = load_archive(data)
        assert contents.manifest_path == "story_content/model.xml"
        assert contents.manifest_text == "<model/>"

    def test_missing_manifest_is_not_an_error(self, make_package):
        contents = load_archive(make_package(extra={"media/clip.mp4": b"\x00\x01"}))
        assert contents.manifest_path is None
        assert contents.manifest_text is None
        assert contents.files == ["media/clip.mp4"]

    def test_bom_is_stripped(self, make_package):
        data = make_package(extra={"story.xml": "\ufeff<story/>".encode("utf-8")})
        assert load_archive(data).manifest_text == "<story/>"

    def test_not_a_zip(self):
        with pytest.raises(InvalidArchive) as exc_info:
            load_archive(b"this is definitely not a zip archive")
        assert "Could not open archive" in str(exc_info.value)
        assert exc_info.value.cause is not None

    def test_empty_bytes(self):
        with pytest.raises(InvalidArchive):
            open_archive(b"")

    def test_unsafe_member_is_ignored(self):
        data = build_zip({"story.xml": "<story/>", "../escape.txt": "x"})
        contents = load_archive(data)
        assert "../escape.txt" not in contents.files
        assert contents.manifest_path == "story.xml"

    def test_find_manifest_custom_candidates(self, make_package):
        with open_archive(make_package(extra={"custom/root.xml": "<story/>"})) as zf:
            assert find_manifest(zf) is None
            assert find_manifest(zf, ["custom/root.xml"]) == "custom/root.xml"
