"""
Command Line Interface Package

Unified CLI for statement import and ledger reconciliation.

Command Structure:
- tally: main entry point with utility commands (version, config)
- tally accounts / transactions: ledger management
- tally import: preview and import CSV, fixed-layout text and PDF statements
- tally rules: category rule management and application
- tally recurring / transfers: batch analyses and transfer linking
"""
