"""
Derived user insights.

Responsibilities:
- Hexagon stats, rankings and nutrient cards computed from food logs.
- The taste profile: a weighted aggregate of logs, saves, likes, clicks and
  activity, cached per user and used to bias AI search prompts.
- Implicit activity signals (views, quick exits, searches without clicks).
"""
