# src/markdown/__init__.py — v1
