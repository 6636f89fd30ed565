"""
SAATHI - Multi-Signal Wellness Companion Core

This package provides the risk assessment and therapeutic session
state machine behind the SAATHI wellness chat platform: per-turn
signal extraction, lexicon-driven risk scanning, crisis escalation
and session progress tracking.

IMPORTANT: This is a safety-critical system. Risk computation is
biased toward over-escalation and must never silently default to
"no risk".
"""

__version__ = "0.1.0"
__author__ = "SAATHI Engineering Team"
