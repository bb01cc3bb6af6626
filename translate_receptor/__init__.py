"""
Translate Evidence Receptor
===========================
Verifies credentials against a translation service, discovers the languages
it offers, and produces a sourced evidence report of translated greetings.

Every value in a report is backed by a citation of the service call that
produced it.
"""

__version__ = "1.0.0"
