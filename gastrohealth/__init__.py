# -*- coding: utf-8 -*-
"""GastroHealth AI — symptom tracking and Gemini-backed diet guidance."""

__version__ = "1.0.0"
