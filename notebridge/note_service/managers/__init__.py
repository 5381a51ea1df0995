"""Data access managers for the note service.

Each module provides async functions (or a small class holding injected
collaborators) that encapsulate persistence and business rules.  Managers
accept ``AsyncSession`` as a parameter and raise domain exceptions from
:mod:`notebridge.note_service.errors`, never HTTP exceptions -- that
translation is the app's responsibility.
"""
