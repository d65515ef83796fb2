"""Pure protocol definitions shared by the client and the mock backend.

These modules are intentionally free of HTTP and logging concerns so the
client and the mock server cannot drift apart on paths, keys or size limits.
"""
__all__ = ["apidef", "bounds", "models"]
