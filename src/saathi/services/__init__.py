"""
SAATHI Services Layer

Signal extraction, safety (risk scanning, aggregation, escalation),
adaptation planning, session lifecycle, reply generation and the
orchestrator that ties them together.
"""
