# SPDX-License-Identifier: Apache-2.0
"""Guided journeys: AI replies turned into steps on a rotating sphere."""

__version__ = "0.1.0"
