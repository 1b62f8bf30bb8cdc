"""PR Nightwatch - risk report comments for pull requests.

Runs as a GitHub Action that comments on PRs with:
  - Refactor safety score and risk level
  - Developer fatigue signal
  - Blast radius across repository domains
  - Sensitive artifacts and conflicting open PRs
  - Ownership fingerprint and bus factor
"""
