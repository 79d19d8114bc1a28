# -*- coding: utf-8 -*-
"""Symptom log domain (append-only per user)."""
