"""Authoring-time checks for event definitions.

These never block execution; the editor shows the report next to the event dialog.
"""
