"""Canned Gemini generateContent payloads."""

import json

FLAGGED_DECISION = {
    "should_flag": True,
    "rationale": "Uses profanity, which is unprofessional",
    "matched_criteria": ["Forbidden words", "Professionalism"],
}

CLEAN_DECISION = {
    "should_flag": False,
    "rationale": "Positive and professional",
    "matched_criteria": [],
}

GEMINI_FLAGGED_RESPONSE = {
    "candidates": [
        {
            "content": {"role": "model", "parts": [{"text": json.dumps(FLAGGED_DECISION)}]},
            "finishReason": "STOP",
            "index": 0,
        }
    ],
    "usageMetadata": {"promptTokenCount": 142, "candidatesTokenCount": 31, "totalTokenCount": 173},
    "modelVersion": "gemini-2.5-flash-lite",
}

GEMINI_CLEAN_RESPONSE = {
    "candidates": [
        {
            "content": {"role": "model", "parts": [{"text": json.dumps(CLEAN_DECISION)}]},
            "finishReason": "STOP",
            "index": 0,
        }
    ],
    "modelVersion": "gemini-2.5-flash-lite",
}

GEMINI_NO_CANDIDATES_RESPONSE = {"candidates": [], "promptFeedback": {"blockReason": "SAFETY"}}

GEMINI_NO_PARTS_RESPONSE = {"candidates": [{"content": {"role": "model", "parts": []}, "finishReason": "MAX_TOKENS"}]}

GEMINI_NON_JSON_RESPONSE = {"candidates": [{"content": {"role": "model", "parts": [{"text": "Yes, delete it."}]}}]}

GEMINI_RATE_LIMIT_ERROR = {
    "error": {
        "code": 429,
        "message": "Resource has been exhausted (e.g. check quota).",
        "status": "RESOURCE_EXHAUSTED",
    }
}

GEMINI_INVALID_KEY_ERROR = {
    "error": {
        "code": 400,
        "message": "API key not valid. Please pass a valid API key.",
        "status": "INVALID_ARGUMENT",
    }
}

GEMINI_UNAVAILABLE_ERROR = {
    "error": {
        "code": 503,
        "message": "The model is overloaded. Please try again later.",
        "status": "UNAVAILABLE",
    }
}
