"""Offline access code engine.

Imported through the ``backend`` namespace, e.g. ``backend.accesscode.app``.
"""

__all__: list[str] = []
