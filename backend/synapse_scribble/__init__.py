"""
Synapse Scribble Backend - Application Package
==============================================

What: Whiteboard-and-voice ideation backend that chains Gemini calls to
      transcribe, summarize, extract themes, refine whiteboard text, illustrate,
      derive insights and assemble a session report.
Who:  Imported by uvicorn (synapse_scribble.main:app), pytest and the flows.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   SessionService (page handlers)    │  ← Cycle orchestration, session state
    ├─────────────────────────────────────┤
    │          Flows (one AI call each)   │  ← Input checks, prompt, fallback
    ├─────────────────────────────────────┤
    │   GeminiService (LLM backend)       │  ← SDK calls, circuit breaker
    └─────────────────────────────────────┘

    Schemas (pydantic) describe every flow input/output and are shared by
    all layers. Nothing is persisted: sessions live in process memory.
"""

__version__ = "1.0.0"
