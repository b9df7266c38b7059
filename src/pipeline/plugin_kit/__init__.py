# src/pipeline/plugin_kit/__init__.py - v1
