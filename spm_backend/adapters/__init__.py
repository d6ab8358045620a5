"""
Adapters — thin wrappers around external tools (processes, git).

The pipeline only talks to external programs through these modules.
"""
