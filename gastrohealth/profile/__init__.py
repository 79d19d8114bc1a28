# -*- coding: utf-8 -*-
"""Profile domain (onboarding survey answers)."""
