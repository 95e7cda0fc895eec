"""Incremental asset sync with generated Lua bindings."""
