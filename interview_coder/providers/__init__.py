"""Concrete adapters for the interfaces in :mod:`interview_coder.interfaces`."""
