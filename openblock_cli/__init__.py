"""
openblock-cli - toolchain dependency resolution for OpenBlock plugins.
"""

try:
    from importlib.metadata import version

    __version__ = version("openblock-cli")
except Exception:
    __version__ = "0.1.0"
