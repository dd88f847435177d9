import os
from typing import Optional, Dict, Any
import requests


def publish_result(payload: Dict[str, Any], api_url: Optional[str] = None, token: Optional[str] = None):
    api_url = api_url or os.getenv("TRA_API_URL")
    token = token or os.getenv("TRA_API_TOKEN")

    if not api_url:
        raise ValueError("API URL not provided. Set TRA_API_URL env var or use --api-url")

    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    response = requests.post(
        f"{api_url.rstrip('/')}/api/v1/results",
        json=payload,
        headers=headers,
        timeout=30,
    )

    response.raise_for_status()
    return response.json()
