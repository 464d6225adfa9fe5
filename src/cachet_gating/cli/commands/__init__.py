# src/cachet_gating/cli/commands/__init__.py
# Sub-command implementations for the cachet-gate CLI.
