"""
Top-level package for the wallet browser.

This package exposes the core architecture (records, filtering, comparison,
codec and services). Most code should import from submodules such as:
    wallet_browser.core
    wallet_browser.codec
    wallet_browser.services
"""

__all__: list[str] = []
