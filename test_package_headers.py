#!/usr/bin/env python3
"""
Every module in the storyimport package carries the project license header.
"""

from pathlib import Path

import pytest

PACKAGE_DIR = Path(__file__).parent / "storyimport"
HEADER = (
    '#!/usr/bin/env python3\n'
    '"""\n'
    '# Storyimport\n'
    '# Copyright (c) 2026 Dale Chapman\n'
    '# Licensed under the MIT License. See LICENSE in the project root.\n'
)


@pytest.mark.parametrize("module", sorted(PACKAGE_DIR.glob("*.py")), ids=lambda p: p.name)
def test_module_has_license_header(module):
    assert module.read_text(encoding="utf-8").startswith(HEADER)
