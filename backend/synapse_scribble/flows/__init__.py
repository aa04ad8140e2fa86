"""
Synapse Scribble Backend - Flows
================================

One module per flow. Every flow is an async function that takes its
validated input model and returns a FlowResult; blank input and backend
failures become fixed fallback texts. generate_image is the exception and
raises ImageGenerationError when no image comes back.

Flow Inventory:
    - transcription.transcribe_audio            (simulated, no backend call)
    - summarize.summarize_transcription
    - themes.identify_themes
    - whiteboard.generate_whiteboard_ideas
    - image.generate_image
    - insights.generate_insights
    - report.generate_session_report
"""
