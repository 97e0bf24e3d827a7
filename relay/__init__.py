"""relay/ -- Host-side HTTP relay: runs the hardening script and serves inventory.

Layer rule: relay/ imports from core/config only. It knows nothing about the
dashboard session, api/, or web/; the dashboard reaches it over HTTP.
"""
