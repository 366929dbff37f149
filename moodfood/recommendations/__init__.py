"""
Recommendation filter and ranker.

Responsibilities:
- Hold the static cuisine and mood keyword tables.
- Filter a region's restaurants by the user's cuisine preferences.
- Stably re-order the survivors so mood-matching categories come first.
"""
