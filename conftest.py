"""
Pytest configuration and fixtures.

Packages are built in memory with zipfile so tests never touch sample
files on disk.
"""

import io
import sys
import zipfile
from pathlib import Path
from typing import Callable, Dict, Optional, Union

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))


MCQ_STORY = """<?xml version="1.0" encoding="UTF-8"?>
<story>
  <slide id="s1" name="Quiz">
    <text>Choose wisely</text>
  </slide>
  <question id="q1" type="multiplechoice" prompt="2 + 2 = ?" points="2">
    <option id="a">3</option>
    <option id="b" correct="true">4</option>
    <option id="c">5</option>
  </question>
</story>
"""

FLIPCARD_STORY = """<story>
  <slide id="s1" name="Cards">
    <text>Front A</text>
    <text>Back A</text>
  </slide>
  <slide id="s2" name="More">
    <text>Back B</text>
  </slide>
</story>
"""


def build_zip(entries: Dict[str, Union[str, bytes]]) -> bytes:
    """Zip a {name: content} mapping into archive bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_package() -> Callable[..., bytes]:
    """Factory: make_package(story_xml, manifest="story.xml", extra=None) -> bytes."""
    def _make(
        story_xml: Optional[str] = None,
        manifest: str = "story.xml",
        extra: Optional[Dict[str, Union[str, bytes]]] = None,
    ) -> bytes:
        entries: Dict[str, Union[str, bytes]] = {}
        if story_xml is not None:
            entries[manifest] = story_xml
        entries.update(extra or {})
        if not entries:
            entries["readme.txt"] = "empty package"
        return build_zip(entries)
    return _make


@pytest.fixture
def mcq_package(make_package) -> bytes:
    return make_package(MCQ_STORY)


@pytest.fixture
def flipcard_package(make_package) -> bytes:
    return make_package(FLIPCARD_STORY)
