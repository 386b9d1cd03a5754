"""
Telegram relay API Endpoints.

Public endpoints the storefront posts its checkout and callback forms to.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import ApiResponse
from api.network import client_address, read_json_payload
from domain.submission import SubmissionKind
from services.errors import IntakeError
from services.intake_service import IntakePipeline

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ApiResponse, "description": "Invalid payload or bot rejected"},
    413: {"model": ApiResponse, "description": "Payload too large"},
    429: {"model": ApiResponse, "description": "Rate limited or duplicate submit"},
    502: {"model": ApiResponse, "description": "Telegram rejected the message"},
}


async def _handle(kind: SubmissionKind, request: Request) -> JSONResponse:
    pipeline: IntakePipeline = request.app.state.pipeline
    source = client_address(request, request.app.state.settings.trust_proxy_hops)

    decision = None
    try:
        decision = pipeline.admit(kind, source)
        payload = await read_json_payload(request)
        await pipeline.process(kind, payload)
    except IntakeError as e:
        decision = getattr(e, "decision", decision)
        response = JSONResponse(
            status_code=e.status_code,
            content=ApiResponse(ok=False, error=e.message).to_content(),
        )
    else:
        response = JSONResponse(content=ApiResponse(ok=True).to_content())

    # Rate-limit headers go on every response of a limited route.
    if decision is not None:
        response.headers.update(decision.headers())
    return response


@router.post(
    "/order",
    response_model=ApiResponse,
    responses=_ERROR_RESPONSES,
    summary="Relay Order",
    description="Validate a checkout submission and post it to the orders chat.",
)
async def relay_order(request: Request):
    """
    Relay a storefront order.

    **Example request:**
    ```json
    {
      "kind": "order",
      "customer": {"firstName": "Olena", "lastName": "Ivanenko", "phone": "+380501234567"},
      "delivery": {"city": "Kyiv", "address": "Nova Poshta #5"},
      "items": [{"title": "Widget", "qty": 2, "price": 150}],
      "total": 300,
      "sourceUrl": "https://shop.example/checkout"
    }
    ```
    """
    return await _handle(SubmissionKind.ORDER, request)


@router.post(
    "/lead",
    response_model=ApiResponse,
    responses=_ERROR_RESPONSES,
    summary="Relay Lead",
    description="Validate a callback request and post it to the leads chat.",
)
async def relay_lead(request: Request):
    """
    Relay a callback request. Only `customer.firstName`, `customer.phone` and
    `sourceUrl` are read.
    """
    return await _handle(SubmissionKind.LEAD, request)
