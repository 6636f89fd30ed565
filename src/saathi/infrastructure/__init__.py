"""
SAATHI Infrastructure Layer

Collaborator contracts (response generator, profile/session store,
notifier) with in-memory implementations, plus metrics.
All collaborators implement abstract interfaces for testability.
"""
