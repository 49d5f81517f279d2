"""
Host adapters — the only code that touches the filesystem, external
processes and the process environment on behalf of actions.
"""
