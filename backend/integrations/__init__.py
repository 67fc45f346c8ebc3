# backend/integrations/__init__.py
"""
External collaborators: vision model clients and camera devices.
"""
