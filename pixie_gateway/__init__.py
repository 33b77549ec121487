"""
Pixie Gateway - HTTP front door for Pixie PxL scripts

Accepts a PxL script over HTTP, runs it on a Pixie cluster through the
vendor client and returns the streamed tables as JSON.

Architecture:
- Each module is self-contained with clear interfaces
- The remote client is consumed through an adapter protocol
- No state survives a request

Modules:
- accumulator: Streaming sink that flattens table results
- query: Client adapter, error taxonomy and query orchestration
- api: Request/response models
- config: Process settings
"""

__version__ = "1.0.0"
