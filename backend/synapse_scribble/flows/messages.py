"""
Fixed user-facing texts returned by the flows.

The application speaks Danish; every fallback a flow can return is defined
here so the session layer, the report classifier and the tests agree on
the exact strings.
"""

# ── Transcription ─────────────────────────────────────────────────────────
TRANSCRIPTION_INVALID_AUDIO = "Kunne ikke transskribere lyden: ugyldig lyddata."
TRANSCRIPTION_STUB = (
    "Automatisk transskription (simuleret): [Brugerens tale ville blive "
    "transskriberet her. Optagelsen ({mime_type}, {size_kb:.1f} kB) blev modtaget. "
    "Nøgleemner kunne være A, B, C.]"
)

# ── Summary ───────────────────────────────────────────────────────────────
SUMMARY_UNAVAILABLE = "Resumé utilgængeligt."
SUMMARY_FAILED = "Kunne ikke opsummere transskriptionen."

# ── Themes ────────────────────────────────────────────────────────────────
THEMES_EMPTY_TEXT = "Ingen temaer kunne identificeres fra den tomme tekst."
THEMES_UNAVAILABLE = "Temaer utilgængelige."
THEMES_GENERAL = "Generelle temaer"
MAX_THEMES = 5

# ── Whiteboard ────────────────────────────────────────────────────────────
WHITEBOARD_INVALID_INPUT = "Kan ikke generere whiteboard-idéer uden gyldigt input."
WHITEBOARD_EMPTY_OUTPUT = "Kunne ikke generere whiteboard-indhold."
WHITEBOARD_FAILED = "Fejl under generering af whiteboard-idéer."
WHITEBOARD_NO_IDEAS = "Ingen specifikke whiteboard-idéer kunne udledes fra samtalen."

# ── Image ─────────────────────────────────────────────────────────────────
IMAGE_SKIPPED = "Billedgenerering sprunget over: ugyldig eller utilstrækkelig prompt."
IMAGE_NO_IMAGE = "Billedgenerering fejlede eller returnerede ikke en gyldig billed-URL."
IMAGE_FAILED_PREFIX = "Fejl under billedgenerering"
IMAGE_REGION_UNAVAILABLE = "Billedgenerering er desværre ikke tilgængelig i din region."
IMAGE_DEFAULT_CONCEPT = "abstrakt visualisering af diskussion"

# Substrings marking a prompt that was assembled from earlier fallbacks
INVALID_PROMPT_MARKERS = (
    "Fejl",
    "Kunne ikke",
    "Ingen specifikke",
    "Billedgenerering sprunget over",
    SUMMARY_UNAVAILABLE,
    THEMES_UNAVAILABLE,
)

# ── Insights ──────────────────────────────────────────────────────────────
INSIGHTS_UNAVAILABLE = "Indsigter utilgængelige."
INSIGHTS_FAILED = "Kunne ikke generere nye indsigter."

# ── Report ────────────────────────────────────────────────────────────────
REPORT_NO_CYCLES = "Ingen cyklusdata at generere rapport fra."
REPORT_EMPTY_OUTPUT = "Kunne ikke generere sessionsrapport."
REPORT_FAILED = "Fejl under generering af sessionsrapport."
REPORT_DEFAULT_TITLE = "AI Analyse Sessionsrapport"
REPORT_NOT_SPECIFIED = "(Ikke specificeret)"
REPORT_DATE_PLACEHOLDER = "(Indsæt dags dato automatisk)"
REPORT_NO_INSIGHTS = "Ingen indsigter genereret for denne cyklus."
REPORT_NO_WHITEBOARD = "Intet whiteboard-indhold genereret for denne cyklus."

# ── Image status (report classifier) ──────────────────────────────────────
IMAGE_STATUS_SUCCESS_MARKER = "data:image"
IMAGE_STATUS_SUCCESS = "Billede succesfuldt genereret."
IMAGE_STATUS_REGION_MARKER = "ikke tilgængelig i din region"
IMAGE_STATUS_REGION = "Billedgenerering er ikke tilgængelig i denne region."
IMAGE_STATUS_ERROR_PREFIXES = ("Fejl", "Billedgenerering fejlede", "Kunne ikke")
IMAGE_STATUS_SKIP_PREFIXES = ("Billedgenerering sprunget over",)
IMAGE_STATUS_INVALID_PREFIX = "Ugyldig"
IMAGE_STATUS_INVALID = "Billedgenerering fejlede: {value}"
IMAGE_STATUS_NO_DATA = "Ingen billeddata eller ukendt status."

# ── Session / UI feedback ─────────────────────────────────────────────────
AI_OVERLOADED = (
    "AI-tjenesten (Google) er midlertidigt overbelastet eller utilgængelig. "
    "Prøv venligst igen om et øjeblik."
)
AI_UNKNOWN_ERROR = "En ukendt fejl opstod."
SESSION_EMPTY_TRANSCRIPTION = "Transskription er tom. Kan ikke starte analyse."
SESSION_CYCLE_LIMIT = "Maksimalt antal cyklusser ({max_cycles}) er nået. Start en ny session."
SESSION_MISSING_VOICE_PROMPT = "Stemmeprompt er tom. Sig eller skriv en instruktion til whiteboardet."
SESSION_MISSING_SUMMARY = "Kør en analyse først, så der er et resumé at bygge videre på."
SESSION_NO_INSIGHTS = "Cyklussen har ingen indsigter at starte en ny samtale fra."
SESSION_TRANSCRIPTION_FAILED = "Transskription fejlede"
SESSION_SUMMARY_FAILED = "Resumé fejlede"
SESSION_THEMES_FAILED = "Temaidentifikation fejlede; bruger generelle temaer."
SESSION_WHITEBOARD_FAILED = "Whiteboard-idéer kunne ikke genereres"
SESSION_INSIGHTS_FAILED = "Nye indsigter kunne ikke genereres"
