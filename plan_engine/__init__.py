"""Training plan engine.

Decodes generated training plans into a canonical structure, classifies
running activities by workout type, matches them to planned days and
analyzes plan compliance.
"""

__version__ = "0.1.0"
