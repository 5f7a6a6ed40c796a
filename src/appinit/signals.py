"""Module: appinit.signals

Purpose: Signals sent during initialization.

Key Components:
- env_refreshed: Sent after a stage persists values and the env file is reloaded.
  Receivers get ``path`` (Path of the env file) and ``values`` (parsed dict).
"""

from django.dispatch import Signal

env_refreshed = Signal()
