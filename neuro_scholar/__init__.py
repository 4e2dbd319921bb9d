"""Neuro Scholar: a resumable research-report orchestration pipeline.

Turns a natural-language query into a multi-section academic report whose
citations are restricted to DOI-verified sources retrieved during the run.
"""

__version__ = "0.1.0"
