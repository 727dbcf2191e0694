"""Account and content rules.

- Word lists: comma-separated administrator lists compiled to one regex
- Domains: the bundled exact-match disposable-domain list
- Validators: pure predicates over user snapshots
"""
