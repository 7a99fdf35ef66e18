import re
from typing import List

from .errors import InputTooShortError

RATINGS: List[str] = ["excellent", "good", "fair", "poor", "dangerous"]
RISK_LEVELS: List[str] = ["safe", "moderate", "risky"]

MIN_TEXT_LENGTH = 5

# Parsed by interpret.py / validated by schemas.py. Bump SCHEMA_VERSION when this changes.
SCHEMA_VERSION = "eatwise_report_v1"

ANALYSIS_SCHEMA_TEXT = """
{
  "overallScore": (0-100),
  "overallRating": ("excellent"|"good"|"fair"|"poor"|"dangerous"),
  "ingredients": [
    {
      "name": "ingredient name",
      "safetyScore": (0-100),
      "riskLevel": ("safe"|"moderate"|"risky"),
      "concerns": ["concern1", "concern2"],
      "allergenInfo": {
        "isAllergen": true/false,
        "allergenType": "nuts" | "dairy" | "gluten" | "none"
      }
    }
  ],
  "summary": "brief safety explanation",
  "topRiskyIngredients": ["ingredient1", "ingredient2"],
  "recommendations": ["recommendation1", "recommendation2"]
}
""".strip()


def normalize_text(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def build_prompt(ingredient_text: str) -> str:
    clean = normalize_text(ingredient_text)
    if len(clean) < MIN_TEXT_LENGTH:
        raise InputTooShortError(len(clean), MIN_TEXT_LENGTH)

    return f"""
Analyze these food ingredients for safety: "{clean}"

Return only JSON with this structure:
{ANALYSIS_SCHEMA_TEXT}

Only return valid JSON. Do not include any explanation or text outside the JSON.
If "isAllergen" is false, "allergenType" must be "none".
Focus on harmful additives, preservatives, allergens, and health risks.
""".strip()
