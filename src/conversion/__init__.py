# src/conversion/__init__.py — v1
