"""
Exporter daemon package for the tado° Prometheus exporter.

Authenticates against the tado° cloud with the OAuth2 device-code grant,
polls zone state and weather on a fixed ticker, pulls per-zone temperature
history, and serves both as Prometheus text on /metrics and /history.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""
