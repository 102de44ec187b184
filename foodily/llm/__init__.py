"""
LLM integration layer.

Responsibilities:
- Manage Groq and Gemini API configuration and credentials.
- Answer food questions, classify search queries and expand wheel slots (Groq).
- Summarise weekly eating habits (Groq).
- Cache caller-independent answers.
- Graceful fallback when a model is unavailable or returns invalid output.
"""
