"""Example inference client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseInferenceClient and register the provider in InferenceClientFactory.
"""

import json
from typing import ClassVar

from fitscore.analysis.client_base import BaseInferenceClient


class ExampleClientAdapter(BaseInferenceClient):
    """Example adapter that returns a fixed valid analysis JSON.

    No network calls. Useful for local development and demos without
    provider credentials.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "score": 72,
        "summary": "Example analysis: markers are mostly within normal ranges.",
        "vitals": {
            "Blood Pressure": "124/82 mmHg",
            "Blood Sugar": "98 mg/dL",
        },
        "recommendations": {
            "diet": ["Add a portion of vegetables to every meal"],
            "exercise": ["Walk 30 minutes a day"],
            "lifestyle": ["Keep a regular sleep schedule"],
        },
    }

    def infer(self, reference: str, mime_type: str, instruction: str) -> str:
        _ = reference, mime_type, instruction
        return json.dumps(self.DEFAULT_RESPONSE)
