#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

config.py

Tunable constants for the story import pipeline.

The classifier heuristics below have no documented derivation; they are
kept here as named values so they can be tuned (in code or through a
storyimport.yaml file) without touching the rule chain.

Config file format (all keys optional):

    thresholds:
      flipcard_min_text_runs: 2
      flipcard_max_text_runs: 10
      flipcard_max_text_length: 200
      timeline_min_text_runs: 5
      reveal_min_text_runs: 3
      gamearena_min_slides: 5
    package_root: converted-storyline-package
    export_format: json

Lookup order for the file:
    1. Explicit path argument
    2. STORYIMPORT_CONFIG environment variable
    3. ./storyimport.yaml
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from storyimport.icons import WARNING


# ============================================================================
# Classifier Thresholds
# ============================================================================

FLIPCARD_MIN_TEXT_RUNS = 2       # Slide needs at least this many text runs
FLIPCARD_MAX_TEXT_RUNS = 10      # ... and at most this many
FLIPCARD_MAX_TEXT_LENGTH = 200   # Every run strictly shorter than this
TIMELINE_MIN_TEXT_RUNS = 5       # Strictly more than this on a timeline slide
REVEAL_MIN_TEXT_RUNS = 3         # Strictly more than this on a reveal slide
GAMEARENA_MIN_SLIDES = 5         # Strictly more slides than this


# ============================================================================
# Archive Layout and Limits
# ============================================================================

# Priority order matters: the first entry present wins
MANIFEST_CANDIDATES: Tuple[str, ...] = (
    "story.xml",
    "story_content/model.xml",
    "story/story.xml",
    "course.xml",
    "presentation.xml",
)

ARCHIVE_EXTENSIONS: Tuple[str, ...] = (".story", ".zip")
ARCHIVE_MIME_MARKERS: Tuple[str, ...] = ("zip", "octet-stream")

MAX_TOTAL_SIZE = 500 * 1024 * 1024  # 500 MB total
MAX_FILE_SIZE = 50 * 1024 * 1024    # 50 MB per file
MAX_FILES = 10000                   # Maximum file count
MAX_COMPRESSION_RATIO = 100         # Maximum compression ratio


# ============================================================================
# Package Reference Defaults
# ============================================================================

DEFAULT_PACKAGE_ROOT = "converted-storyline-package"
DEFAULT_PACKAGE_WIDTH = "100%"
GAMEARENA_HEIGHT = "700px"
SCORMVIEWER_HEIGHT = "600px"

DEFAULT_CONFIG_FILENAME = "storyimport.yaml"
CONFIG_ENV_VAR = "STORYIMPORT_CONFIG"
DEFAULT_HISTORY_LIMIT = 50


@dataclass(frozen=True)
class ClassifierThresholds:
    """Heuristic cut-offs used by the classifier rule chain."""
    flipcard_min_text_runs: int = FLIPCARD_MIN_TEXT_RUNS
    flipcard_max_text_runs: int = FLIPCARD_MAX_TEXT_RUNS
    flipcard_max_text_length: int = FLIPCARD_MAX_TEXT_LENGTH
    timeline_min_text_runs: int = TIMELINE_MIN_TEXT_RUNS
    reveal_min_text_runs: int = REVEAL_MIN_TEXT_RUNS
    gamearena_min_slides: int = GAMEARENA_MIN_SLIDES


DEFAULT_THRESHOLDS = ClassifierThresholds()


@dataclass
class ImportConfig:
    """Settings for one conversion service instance."""
    thresholds: ClassifierThresholds = field(default_factory=ClassifierThresholds)
    package_root: str = DEFAULT_PACKAGE_ROOT
    export_format: str = "json"
    source: str = "default"


def _coerce_thresholds(raw: Any) -> ClassifierThresholds:
    if not isinstance(raw, dict):
        return ClassifierThresholds()

    values: Dict[str, int] = {}
    for f in fields(ClassifierThresholds):
        if f.name not in raw:
            continue
        try:
            values[f.name] = int(raw[f.name])
        except (TypeError, ValueError):
            print(f"[storyimport:warn] {WARNING} Ignoring non-integer threshold {f.name}={raw[f.name]!r}")

    return ClassifierThresholds(**values)


def load_config(path: Optional[Path] = None) -> ImportConfig:
    """
    Load import settings from YAML, falling back to defaults.

    Args:
        path: Explicit config file; overrides the environment variable

    Returns:
        ImportConfig (defaults when no file is found or it cannot be read)
    """
    configured = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILENAME
    config_path = Path(configured)

    if not config_path.is_file():
        return ImportConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"[storyimport:warn] {WARNING} Failed to load config {config_path}: {e}")
        print(f"[storyimport:warn] Using default settings")
        return ImportConfig()

    if not isinstance(data, dict):
        print(f"[storyimport:warn] {WARNING} Config {config_path} is not a mapping, using defaults")
        return ImportConfig()

    return ImportConfig(
        thresholds=_coerce_thresholds(data.get("thresholds")),
        package_root=str(data.get("package_root") or DEFAULT_PACKAGE_ROOT),
        export_format=str(data.get("export_format") or "json"),
        source=str(config_path),
    )
