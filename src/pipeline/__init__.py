# src/pipeline/__init__.py - v1
