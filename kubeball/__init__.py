"""
kubeball - run one kubectl command across many clusters

A kubectl plugin (``kubectl ball``) that fans a command out to several
cluster contexts at once, with fzf-based selection that is remembered
between runs.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- executor: Running kubectl and fzf as child processes
- storage: Persisting the selected clusters and namespace
- selector: Interactive cluster and namespace selection
- runner: Concurrent fan-out and report aggregation
"""

__version__ = "1.0.0"
