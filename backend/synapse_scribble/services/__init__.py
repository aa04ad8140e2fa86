# Services package init
"""
Synapse Scribble Backend - Services Layer
=========================================

What:  Backend access and session orchestration, below the routes and
       around the flows.

Service Inventory:
    - LLMService (abstract): Interface for text and image generation backends
    - GeminiService: Concrete implementation using Google Gemini
    - SessionStore: In-memory registry of live sessions
    - SessionService: Runs analysis cycles and keeps session state
"""
