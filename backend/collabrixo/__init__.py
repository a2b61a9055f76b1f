"""Collabrixo: a small team workspace (kanban board, meetings, shared resources, journey) on top of Appwrite."""

__version__ = "0.1.0"
