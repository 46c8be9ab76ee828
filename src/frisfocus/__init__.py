"""
FrisFocus - habit tracking backend.

Packages:
- frisfocus: configuration, Supabase access, web app and auth
- onboarding: the guided product tour engine
"""

__version__ = "1.0.0"
