"""Response builders carrying the fixed CORS headers.

Content-Type comes from the response class: ``application/json`` for
JSON bodies and ``text/plain`` for the bare acknowledgement.
"""

from typing import Any

from fastapi.responses import JSONResponse, PlainTextResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, X-API-Key",
}


def json_response(status_code: int, content: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def text_response(status_code: int, body: str) -> PlainTextResponse:
    return PlainTextResponse(body, status_code=status_code, headers=CORS_HEADERS)


def error_response(status_code: int, message: str) -> JSONResponse:
    return json_response(status_code, {"error": message})
