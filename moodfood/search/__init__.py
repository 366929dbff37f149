"""
Region search.

Responsibilities:
- Back the internal "list restaurants by region" endpoint with an
  eventually-consistent region index fed by the place search gateway.
- Poll that endpoint from the client until results appear or the retry
  budget runs out.
"""
