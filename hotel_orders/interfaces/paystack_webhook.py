from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-paystack-signature"


@router.post("/api/webhooks/paystack")
async def paystack_webhook(request: Request):
    """
    Paystack webhook endpoint.

    Always answers 200 so Paystack stops retrying, including for bad
    signatures and unknown references. Only an unexpected internal failure
    answers 500, which lets Paystack redeliver later.
    """
    # The signature covers the exact bytes Paystack sent
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    try:
        reconciler = request.app.state.reconciler
        outcome = await run_in_threadpool(reconciler.handle_webhook, raw_body, signature)
        logger.info(f"📨 Paystack webhook handled: {outcome.value}")
    except Exception as e:
        logger.error(f"❌ Webhook Error: {e}", exc_info=True)
        return PlainTextResponse("Webhook error", status_code=500)

    return PlainTextResponse("OK", status_code=200)
