from jinja2 import Environment, StrictUndefined

NOT_A_MEDICATION = "not_a_medication"

DEFAULT_LABEL_EXTRACTION_PROMPT = """
**-Goal-**
The image is a photo taken by a user. Decide whether it shows a medication,
pharmaceutical product, supplement or vitamin, and if so extract it into a graph.

**-Step 1: validation-**
If the image shows anything else (food, household items, blurry or unreadable content),
respond with exactly: {"error": "{{ sentinel }}"}

**-Step 2: extraction-**
Return ONLY valid JSON, no markdown and no explanations, matching:
{
  "medications": {"<brand name>": {"name": "<brand name>", "ingredients": [...], "sideEffects": [...], "symptomsTreated": [...]}},
  "ingredients": {"<ingredient>": {"name": "<ingredient>", "medications": ["<brand name>"], "description": "..."}},
  "effects": {"<effect>": {"name": "<effect>", "medicationsCausingIt": [...], "medicationsTreatingIt": [...], "description": "..."}}
}

Rules:
- Use the brand name (the largest text on the package) as the medication name, simplified
  ("Tylenol", not "Tylenol Extra Strength"). For natural products use the simplest generic term.
- The medication name is never an ingredient name.
- List every active ingredient from the label.
- Include common side effects and the symptoms the medication treats.
- Create an ingredient entry and an effect entry for every name you use.
- Descriptions are at most {{ max_description_words }} words.
- Use proper capitalization ("Acetaminophen", "Headache").
- Never return empty objects; if the medication cannot be identified respond with {"error": "{{ sentinel }}"}.
"""

_env = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_label_prompt(
    template: str = DEFAULT_LABEL_EXTRACTION_PROMPT,
    max_description_words: int = 20,
) -> str:
    """
    Render the label extraction instruction.

    :param template: Jinja template; receives ``sentinel`` and ``max_description_words``.
    :param max_description_words: Length limit for generated descriptions.
    :return: Prompt text.
    """
    return _env.from_string(template).render(
        sentinel=NOT_A_MEDICATION,
        max_description_words=max_description_words,
    ).strip()
