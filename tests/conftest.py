import copy
import io
import json

import pytest
from PIL import Image

from eatwise.ocr import TextExtractor
from eatwise.pipeline import AnalysisPipeline


VALID_PAYLOAD = {
    "overallScore": 42,
    "overallRating": "poor",
    "ingredients": [
        {
            "name": "Sugar",
            "safetyScore": 40,
            "riskLevel": "moderate",
            "concerns": ["High glycemic load"],
            "allergenInfo": {"isAllergen": False, "allergenType": "none"},
        },
        {
            "name": "Red 40",
            "safetyScore": 20,
            "riskLevel": "risky",
            "concerns": ["Artificial colorant", "Hyperactivity in children"],
            "allergenInfo": {"isAllergen": False, "allergenType": "none"},
        },
        {
            "name": "Whey",
            "safetyScore": 75,
            "riskLevel": "safe",
            "concerns": [],
            "allergenInfo": {"isAllergen": True, "allergenType": "dairy"},
        },
    ],
    "summary": "Contains an artificial dye and added sugar.",
    "topRiskyIngredients": ["Red 40", "Sugar"],
    "recommendations": ["Limit consumption", "Look for dye-free alternatives"],
}


@pytest.fixture
def payload():
    return copy.deepcopy(VALID_PAYLOAD)


@pytest.fixture
def payload_json(payload):
    return json.dumps(payload)


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "white").save(buf, format="PNG")
    return buf.getvalue()


class FakeRecognizer:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def __call__(self, image, lang):
        self.calls.append((image, lang))
        if isinstance(self.text, Exception):
            raise self.text
        return self.text


class FakeGenerate:
    def __init__(self, result):
        self.result = result
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.fixture
def make_pipeline():
    def _make(ocr_text, model_result):
        recognizer = FakeRecognizer(ocr_text)
        generate = FakeGenerate(model_result)
        pipeline = AnalysisPipeline(generate, TextExtractor(recognize=recognizer))
        return pipeline, recognizer, generate
    return _make
