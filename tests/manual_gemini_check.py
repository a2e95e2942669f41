"""Manual script to verify the Gemini API key works."""

from __future__ import annotations

import os

import requests
from config.settings import load_config
from modules.services.credentials import read_env_key

config = load_config()  # reads .env into os.environ

BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
API_KEY = read_env_key(config)

if not API_KEY:
    print("[error] GEMINI_API_KEY not set; check .env or environment variables.")
    raise SystemExit(1)

headers = {"x-goog-api-key": API_KEY, "Content-Type": "application/json"}

try:
    resp = requests.get(f"{BASE_URL}/models", headers=headers, timeout=30)
    print("Status:", resp.status_code)
    if resp.ok:
        models = resp.json().get("models", [])
        print("Models count:", len(models))
        wanted = {config.text_model, config.maps_model, config.image_model, config.hq_image_model}
        available = {item.get("name", "").removeprefix("models/") for item in models}
        for name in sorted(wanted):
            print("-", name, "available" if name in available else "MISSING")
    else:
        print(resp.text[:500])

    payload = {"contents": [{"parts": [{"text": "Describe an orange cat sitting on a windowsill in one sentence."}]}]}
    chat = requests.post(
        f"{BASE_URL}/models/{config.text_model}:generateContent",
        headers=headers,
        json=payload,
        timeout=30,
    )
    print("Generation status:", chat.status_code)
    if chat.ok:
        candidates = chat.json().get("candidates", [{}])
        parts = candidates[0].get("content", {}).get("parts", [])
        print("Generation:", " ".join(part.get("text", "") for part in parts))
    else:
        print(chat.text[:500])
except Exception as exc:  # noqa: BLE001
    print("[error]", exc)
    raise
