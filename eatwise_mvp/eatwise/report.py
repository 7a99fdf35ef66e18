from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

NO_ALLERGEN = "none"

# Lower bound of each rating band, best first (same order as prompts.RATINGS).
RATING_BANDS: List[Tuple[int, str]] = [
    (85, "excellent"),
    (70, "good"),
    (50, "fair"),
    (30, "poor"),
    (0, "dangerous"),
]


def rating_for_score(score: int) -> str:
    """Monotonic score -> rating mapping (higher score never yields a worse rating)."""
    if not 0 <= score <= 100:
        raise ValueError(f"score out of range: {score!r}")
    for floor, rating in RATING_BANDS:
        if score >= floor:
            return rating
    return RATING_BANDS[-1][1]


@dataclass(frozen=True)
class AllergenInfo:
    is_allergen: bool
    allergen_type: str = NO_ALLERGEN

    def to_dict(self) -> Dict[str, Any]:
        return {"isAllergen": self.is_allergen, "allergenType": self.allergen_type}


@dataclass(frozen=True)
class IngredientFinding:
    name: str
    safety_score: int
    risk_level: str
    concerns: Tuple[str, ...]
    allergen_info: AllergenInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "safetyScore": self.safety_score,
            "riskLevel": self.risk_level,
            "concerns": list(self.concerns),
            "allergenInfo": self.allergen_info.to_dict(),
        }


@dataclass(frozen=True)
class AnalysisReport:
    overall_score: int
    overall_rating: str
    ingredients: Tuple[IngredientFinding, ...]
    summary: str
    top_risky_ingredients: Tuple[str, ...]
    recommendations: Tuple[str, ...]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AnalysisReport":
        """Build from an already-validated payload (see interpret.validate_payload)."""
        return AnalysisReport(
            overall_score=int(d["overallScore"]),
            overall_rating=d["overallRating"],
            ingredients=tuple(
                IngredientFinding(
                    name=i["name"],
                    safety_score=int(i["safetyScore"]),
                    risk_level=i["riskLevel"],
                    concerns=tuple(i["concerns"]),
                    allergen_info=AllergenInfo(
                        is_allergen=i["allergenInfo"]["isAllergen"],
                        allergen_type=i["allergenInfo"]["allergenType"],
                    ),
                )
                for i in d["ingredients"]
            ),
            summary=d["summary"],
            top_risky_ingredients=tuple(d["topRiskyIngredients"]),
            recommendations=tuple(d["recommendations"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "overallRating": self.overall_rating,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "summary": self.summary,
            "topRiskyIngredients": list(self.top_risky_ingredients),
            "recommendations": list(self.recommendations),
        }


FALLBACK_SCORE = 60


def fallback_report() -> AnalysisReport:
    return AnalysisReport(
        overall_score=FALLBACK_SCORE,
        overall_rating=rating_for_score(FALLBACK_SCORE),
        ingredients=(
            IngredientFinding(
                name="General ingredients",
                safety_score=FALLBACK_SCORE,
                risk_level="moderate",
                concerns=("Unable to identify specific ingredients",),
                allergen_info=AllergenInfo(is_allergen=False, allergen_type=NO_ALLERGEN),
            ),
        ),
        summary="Basic analysis completed. Upload clearer image for better results.",
        top_risky_ingredients=(),
        recommendations=(
            "Choose products with fewer additives",
            "Read labels carefully",
        ),
    )
