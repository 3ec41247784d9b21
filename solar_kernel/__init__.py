"""
Solar Kernel

Infrastructure and persistence shell around the solar financial
projection engine:
- Structured JSON logging
- Typed, code-carrying exceptions
- Injectable clock
- Proposal persistence and lifecycle (draft, sent, viewed, accepted)
"""

__version__ = "0.1.0"
