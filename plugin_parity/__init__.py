"""
plugin-parity: compare the plugin surface of two build-tool ecosystems
by statically analyzing their TypeScript declaration files.
"""

__version__ = "0.1.0"
