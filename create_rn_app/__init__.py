"""create-rn-app -- scaffold an Expo / React Native project from a base template.

The interesting part lives in :mod:`create_rn_app.scaffolder`: the feature
composition engine that patches ``package.json`` / ``app.json`` and writes the
per-integration source files.  :mod:`create_rn_app.cli` wraps it with prompts.
"""

__version__ = "1.0.0"
