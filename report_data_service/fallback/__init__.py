# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Synthetic project data used when the upstream is unavailable.
"""

from .archetypes import ARCHETYPES, Archetype, get_archetype
from .synthesizer import FallbackSynthesizer, synthesize

__all__ = [
    "ARCHETYPES",
    "Archetype",
    "FallbackSynthesizer",
    "get_archetype",
    "synthesize",
]
