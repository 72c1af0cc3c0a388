#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

icons.py - Status glyphs for console output
"""

SUCCESS = "✅"
WARNING = "⚠️"
ERROR = "❌"
