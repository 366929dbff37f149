"""
Place search gateway.

Responsibilities:
- Manage the place-search provider (Kakao Local) configuration and credentials.
- Issue keyword searches restricted to the restaurant category group.
- Normalize provider place documents into PlaceRecord.
"""
