"""
Synapse Scribble Backend - Prompt Templates
===========================================

What:  Prompt strings for every flow and the pure functions that fill them.
How:   Simple templates use str.format; the session report is assembled by
       render_session_report_prompt() from fully-resolved data, so no
       template ever branches on a missing value.
Who:   Called by the flow modules right before the backend call.
"""

from typing import Iterable

from synapse_scribble.flows import messages
from synapse_scribble.schemas.flows import ProcessedCycle, ReportContext


SUMMARIZE_PROMPT = """Summarize the following transcription of a conversation. \
Identify the key points and action items discussed.

Transcription: {transcription}"""


IDENTIFY_THEMES_PROMPT = """Analyser følgende tekst og identificer 3-5 centrale temaer, \
nøglekoncepter eller gennemgående idéer.
Formuler temaerne som en kommasepareret liste af korte, præcise fraser. Svar på dansk.

Tekst til analyse:
{text_to_analyze}

Identificerede temaer (kommasepareret liste på dansk):"""


WHITEBOARD_PROMPT = """Du er en AI-assistent, der hjælper med at generere og forfine idéer \
til et digitalt whiteboard baseret på en samtale. Svar altid på dansk.

Brugerens instruktion (stemmeprompt):
{voice_prompt}

Den fulde transskription af samtalen er:
{transcription}

De overordnede temaer identificeret fra samtalen er: {identified_themes}.

Brug instruktionen og transskriptionen som de primære kilder og temaerne som vejledning \
til at generere nye, relevante idéer eller uddybe eksisterende koncepter.
Sigt efter et whiteboard, der er kortfattet, handlingsorienteret og overskueligt \
(brug f.eks. punktopstillinger og korte sætninger).
Generer mindst 3-5 punkter eller en kort opsummerende tekst til whiteboardet.
Hvis inputtet ikke giver grundlag for meningsfulde whiteboard-idéer, svar da med: \
"{no_ideas}"

Nuværende whiteboard-indhold (kan være tomt):
{current_whiteboard_content}

Generer det forfinede whiteboard-indhold (på dansk):"""


WHITEBOARD_IMAGE_STYLE = (
    "Omsæt følgende koncepter til en **metaforisk og visuel whiteboard-tegning eller "
    "skitse**: {concepts}. Billedet skal være i widescreen 16:9 format og have en "
    "minimalistisk stil, som en hurtig whiteboard-tegning med primært sort tusch på hvid "
    "baggrund, eventuelt med få accentfarver (blå/grøn). Undgå meget tekst; fokuser på at "
    "bruge **symboler, metaforer, diagrammer eller simple abstrakte illustrationer** til "
    "at repræsentere koncepterne på en tankevækkende måde."
)


INSIGHTS_PROMPT = """Du er en AI-facilitator, der hjælper et team med at tænke videre \
efter en samtale. Svar på dansk.

Samtalekontekst (resumé eller transskription):
{conversation_context}

{image_note}

Formuler 3-5 nye, tankevækkende indsigter, spørgsmål eller perspektiver, som samtalen \
endnu ikke har berørt. Skriv dem som en kort punktliste, der kan bruges som udgangspunkt \
for en ny samtale."""

INSIGHTS_IMAGE_NOTE = (
    "Et metaforisk whiteboard-billede genereret fra samtalen er vedlagt. "
    "Brug dets symboler og metaforer som inspiration."
)
INSIGHTS_NO_IMAGE_NOTE = "Der er intet billede til denne samtale; brug kun teksten."


def render_summarize_prompt(transcription: str) -> str:
    return SUMMARIZE_PROMPT.format(transcription=transcription)


def render_themes_prompt(text_to_analyze: str) -> str:
    return IDENTIFY_THEMES_PROMPT.format(text_to_analyze=text_to_analyze)


def render_whiteboard_prompt(
    voice_prompt: str,
    transcription: str,
    identified_themes: str,
    current_whiteboard_content: str,
) -> str:
    return WHITEBOARD_PROMPT.format(
        voice_prompt=voice_prompt or "(ingen)",
        transcription=transcription or "(ingen transskription)",
        identified_themes=identified_themes or "(ingen temaer)",
        current_whiteboard_content=current_whiteboard_content,
        no_ideas=messages.WHITEBOARD_NO_IDEAS,
    )


def render_image_prompt(concepts: str) -> str:
    """Wrap whiteboard concepts in the minimalist sketch style instructions."""
    return WHITEBOARD_IMAGE_STYLE.format(concepts=concepts)


def render_insights_prompt(conversation_context: str, has_image: bool) -> str:
    return INSIGHTS_PROMPT.format(
        conversation_context=conversation_context,
        image_note=INSIGHTS_IMAGE_NOTE if has_image else INSIGHTS_NO_IMAGE_NOTE,
    )


# ══════════════════════════════════════════════════════════════════════════
# Session Report
# ══════════════════════════════════════════════════════════════════════════

_REPORT_HEADER = """Du er en AI-assistent, der har til opgave at generere en omfattende \
sessionsrapport baseret på en række AI-analysecyklusser.
Strukturer din output præcist som følger, og brug Markdown til formatering af overskrifter \
og lister. Sørg for, at alle sektioner adresseres.
Hvis data for et specifikt punkt i en cyklus er en fallback- eller fejlbesked (f.eks. \
'Resumé utilgængeligt', 'Billedgenerering fejlede', 'Billedgenerering er ikke tilgængelig \
i denne region.'), skal du bemærke dette passende i stedet for at forsøge at opfinde \
indhold. Svar på dansk.

# Rapporttitel: {report_title}
Version/Dato: {date_placeholder}
Kunde/Projektnavn: {project_name}
Kontaktpersoner: {contact_persons}


## Indholdsfortegnelse
(Generer en simpel liste over hovedsektionerne nedenfor)
1. Executive Summary
2. Metode & Datagrundlag
3. Iterationsoverblik
4. Tværgående temaer & mønstre
5. Visuelle fund
6. Strategiske implikationer
7. Anbefalinger & næste handlinger

## 1. Executive Summary
*   Formål med analysen: (Opsummer formålet baseret på den overordnede kontekst af \
cyklusserne - typisk idéudvikling og indsigtgenerering fra samtaler)
*   Nøglefund og anbefalinger (3-5 bullets baseret på en samlet analyse af alle cyklusser):
    *   (Fund/anbefaling 1)
    *   (Fund/anbefaling 2)
    *   (Fund/anbefaling 3)

## 2. Metode & Datagrundlag
### 2.1 Analyseworkflow
Processen har involveret analyse af inputtekst (transskriptioner/indsigter), generering af \
AI-billeder (hvis relevant), og efterfølgende billedanalyse for at udlede nye indsigter. \
Dette er gentaget i op til {cycle_count} iterationer.
### 2.2 Inputkilder
De primære inputkilder har været de rå tekster fra hver cyklus (transskriptioner eller \
tidligere indsigter).
### 2.3 Brugte værktøjer og modeller
Analyserne og genereringen er foretaget ved hjælp af Gemini-modeller.

## 3. Iterationsoverblik
"""

_REPORT_CYCLE = """### Cyklus {index} – Formål
(Formålet med denne cyklus var typisk at analysere inputteksten: "{transcription}")

#### Identificerede temaer i cyklus {index}
{themes}

#### Proces & prompt-ændringer
(Prompts er faste for hvert trin. Beskriv kort de generelle trin: transkription/input -> \
resumé -> temaer -> whiteboard -> billede -> indsigter)

#### AI-genererede billeder (miniaturer)
*   Billede genereret for cyklus {index}: {image_status} (Bemærk: Miniature-visning er \
ikke mulig i tekstformat)

#### Primære indsigter fra cyklus {index}
{insights}

#### Nye spørgsmål / næste skridt fra cyklus {index}
(Baseret på indsigterne fra denne cyklus, hvilke nye spørgsmål eller næste skridt kunne \
opstå? - formuler 1-2)

#### Whiteboard-highlights / citater fra cyklus {index}
{whiteboard}
---
"""

_REPORT_FOOTER = """
## 4. Tværgående temaer & mønstre
*   Sammenfatning af tilbagevendende topics fra cyklusserne: (Analyser alle temaer og \
indsigter på tværs af cyklusserne. Identificer og opsummer 2-3 temaer eller mønstre, der \
går igen eller udvikler sig gennem iterationerne)
*   Klynger af relaterede idéer eller risikopunkter: (Baseret på ovenstående, er der \
klynger af idéer eller potentielle risici, der er blevet fremhævet?)

## 5. Visuelle fund
*   Illustrer, hvordan billedgenerationen har beriget eller udfordret tekst-indsigterne: \
(Reflekter over, hvordan det genererede billede (hvis succesfuldt) i hver cyklus kunne have \
tilføjet en ny dimension til forståelsen af teksten, eller udfordret de oprindelige \
indsigter. Hvis billedgenerering ofte fejlede eller ikke var tilgængelig, bemærk dette.)

## 6. Strategiske implikationer
*   Hvad betyder indsigterne for forretningsmål, produktroadmap og ressourcer?: (Baseret \
på de samlede indsigter, hvilke overordnede strategiske implikationer kan udledes?)
*   Trade-offs identificeret (fx tempo kontra dybde): (Er der identificeret nogle \
trade-offs gennem processen?)

## 7. Anbefalinger & næste handlinger
*   Prioriteret to-trins plan (Quick Wins vs. Long-Term):
    *   Quick Wins: (Forslag 1-2)
    *   Long-Term: (Forslag 1-2)
*   KPI-forslag eller eksperimentdesign til validering: (Forslag 1-2)
"""


def render_session_report_prompt(
    context: ReportContext,
    cycles: Iterable[ProcessedCycle],
) -> str:
    """
    Build the report prompt from resolved metadata and processed cycles.

    Pure function: the same inputs always give the same prompt. The date
    line keeps the placeholder token; the flow substitutes the real date
    in the model's answer.
    """
    cycles = list(cycles)
    sections = [
        _REPORT_HEADER.format(
            report_title=context.report_title,
            date_placeholder=messages.REPORT_DATE_PLACEHOLDER,
            project_name=context.project_name,
            contact_persons=context.contact_persons,
            cycle_count=len(cycles),
        )
    ]
    for cycle in cycles:
        sections.append(
            _REPORT_CYCLE.format(
                index=cycle.display_index,
                transcription=cycle.transcription,
                themes=cycle.identified_themes or messages.THEMES_UNAVAILABLE,
                image_status=cycle.processed_generated_image_status,
                insights=cycle.new_insights or messages.REPORT_NO_INSIGHTS,
                whiteboard=cycle.whiteboard_content or messages.REPORT_NO_WHITEBOARD,
            )
        )
    sections.append(_REPORT_FOOTER)
    return "\n".join(sections)
