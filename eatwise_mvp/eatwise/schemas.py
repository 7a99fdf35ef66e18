from .prompts import RATINGS, RISK_LEVELS


NON_EMPTY_STRING = {"type": "string", "minLength": 1}
SCORE = {"type": "integer", "minimum": 0, "maximum": 100}


INGREDIENT_SCHEMA = {
  "type": "object",
  "required": ["name", "safetyScore", "riskLevel", "concerns", "allergenInfo"],
  "properties": {
    "name": NON_EMPTY_STRING,
    "safetyScore": SCORE,
    "riskLevel": {"type": "string", "enum": RISK_LEVELS},
    "concerns": {"type": "array", "items": {"type": "string"}},
    "allergenInfo": {
      "type": "object",
      "required": ["isAllergen", "allergenType"],
      "properties": {
        "isAllergen": {"type": "boolean"},
        "allergenType": NON_EMPTY_STRING,
      },
    },
  },
}

# Extra keys from the model are tolerated and dropped when the report is built.
ANALYSIS_REPORT_SCHEMA = {
  "type": "object",
  "required": [
    "overallScore", "overallRating", "ingredients",
    "summary", "topRiskyIngredients", "recommendations",
  ],
  "properties": {
    "overallScore": SCORE,
    "overallRating": {"type": "string", "enum": RATINGS},
    "ingredients": {"type": "array", "items": INGREDIENT_SCHEMA},
    "summary": NON_EMPTY_STRING,
    "topRiskyIngredients": {"type": "array", "items": {"type": "string"}},
    "recommendations": {"type": "array", "items": NON_EMPTY_STRING},
  },
}
