# -*- coding: utf-8 -*-
"""Gemini proxy: meal plans, food checks, trigger analysis, recipes."""
