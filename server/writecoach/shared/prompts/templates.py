"""
Prompt templates.

Both templates ask for a single JSON object; the shapes match
AnalysisResult and GeneratedTopic.
"""

EVALUATOR_TEMPLATE = """You are an IELTS/TOEIC examiner. Evaluate the learner's English translation against the Vietnamese original.

Target: {target}
Original (Vietnamese): "{source_text}"
Learner's translation: "{user_text}"

IMPORTANT: reply with JSON only, starting with {{ and ending with }}. No markdown, no commentary.

Required structure:
{{
  "accuracy": 85,
  "vocabulary_status": "Advanced",
  "grammar_status": "Good",
  "suggestions": [
    {{
      "error": "exact wrong phrase from the translation",
      "fix": "corrected phrase",
      "reason": "detailed explanation in Vietnamese of the grammar or vocabulary rule and the correct usage"
    }}
  ],
  "refined_text": ""
}}

Rules:
- accuracy: number 0-100 weighted as meaning 40%, grammar 30%, vocabulary 20%, naturalness 10%
- vocabulary_status: "Advanced" | "Good" | "Needs Review"
- grammar_status: "Good" | "Warning"
- suggestions: one entry per concrete mistake, "error" copied verbatim from the translation
- refined_text: leave empty

Start your answer with {{ now:
"""

TOPIC_TEMPLATE = """You are an exam designer. Create an essay topic for {certificate_name}, band {band}.

Format: {format}

IMPORTANT: reply with JSON only, starting with {{ and ending with }}. No markdown, no commentary.

Required structure (exactly 4 sections):
{{
  "title": "The essay question in English",
  "sections": [
    {{"id": "intro", "label": "Introduction", "vn": "A complete Vietnamese introduction paragraph (100-150 words): hook, background, thesis."}},
    {{"id": "body1", "label": "Body Paragraph 1", "vn": "A complete Vietnamese paragraph for the first argument (120-180 words): topic sentence, analysis, example, closing sentence."}},
    {{"id": "body2", "label": "Body Paragraph 2", "vn": "A complete Vietnamese paragraph for the second argument or counter-argument (120-180 words)."}},
    {{"id": "conclusion", "label": "Conclusion", "vn": "A complete Vietnamese conclusion paragraph (80-120 words): summary, restated position, recommendation."}}
  ],
  "instructions": "Short optional guidance"
}}

Rules:
- every "vn" value is a natural, coherent Vietnamese paragraph, never bullet points
- content and difficulty suit band {band} of {certificate_name}

Start your answer with {{ now:
"""


def build_evaluator_prompt(target: str, source_text: str, user_text: str) -> str:
    """Prompt asking for an AnalysisResult JSON object."""
    return EVALUATOR_TEMPLATE.format(target=target, source_text=source_text, user_text=user_text)


def build_topic_prompt(certificate_name: str, band: str, format: str) -> str:
    """Prompt asking for a GeneratedTopic JSON object."""
    return TOPIC_TEMPLATE.format(certificate_name=certificate_name, band=band, format=format)
