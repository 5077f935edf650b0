"""NarrativeCheck: Reddit evidence gathering and narrative synthesis for listed companies."""

__version__ = "0.1.0"
