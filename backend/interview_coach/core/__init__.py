"""
Core interview state machine: timer, sequencer, resolution engine, ledger.
"""
