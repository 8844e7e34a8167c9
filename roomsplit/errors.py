"""Error taxonomy for the split engine and its HTTP mapping."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RoomSplitError(ValueError):
    """Base class for errors raised by the split engine."""


class InvalidInput(RoomSplitError):
    """Missing, negative or non-finite numeric input. A caller bug."""


class ShareMismatch(RoomSplitError):
    """Shares do not add up to the expense amount within tolerance."""

    def __init__(self, computed_sum, amount):
        self.computed_sum = computed_sum
        self.amount = amount
        super().__init__(
            f"Shares total ({computed_sum:.2f}) must equal expense amount ({amount:.2f})"
        )


def _share_mismatch_handler(request: Request, exc: ShareMismatch):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "computed_sum": float(exc.computed_sum),
            "amount": float(exc.amount),
        },
    )


def _invalid_input_handler(request: Request, exc: InvalidInput):
    logger.info("Invalid input on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShareMismatch, _share_mismatch_handler)
    app.add_exception_handler(InvalidInput, _invalid_input_handler)
