"""Unit test configuration.

Unit tests never touch external services: stores are in-memory, mocked
(AsyncMock) or served by httpx.MockTransport.
"""
