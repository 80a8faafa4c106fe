from __future__ import annotations

from typing import Dict

STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "error_select_image": "Please select an image first.",
        "error_analysis_failed": "Analysis failed. Please try again with a different image.",
        "error_login_required": "Please sign in first.",
        "test_saved": "Test result saved. You can find it on your dashboard.",
        "analysis_saved": "Analysis saved.",
        "not_food": "No food was recognised in the image.",
    },
    "fi": {
        "error_select_image": "Valitse ensin kuva.",
        "error_analysis_failed": "Analyysi epäonnistui. Yritä uudelleen toisella kuvalla.",
        "error_login_required": "Kirjaudu ensin sisään.",
        "test_saved": "Testitulos tallennettu. Löydät sen omalta sivultasi.",
        "analysis_saved": "Analyysi tallennettu.",
        "not_food": "Kuvasta ei tunnistettu ruokaa.",
    },
}


def t(language: str, key: str) -> str:
    table = STRINGS.get(language) or STRINGS["en"]
    return table.get(key) or STRINGS["en"].get(key, key)
