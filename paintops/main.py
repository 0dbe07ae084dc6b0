from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from paintops.config import settings
from paintops.errors import ConfirmationRequired, NotFoundError, ValidationFailed
from paintops.routers import (
    activities,
    auth,
    clients,
    invoices,
    payments,
    personnel,
    projects,
    purchase_orders,
    quotes,
    reports,
    service_orders,
    totals,
)

logging.basicConfig(level=settings.log_level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title='Painting Contractor Operations')


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={'message': str(exc)})


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'message': exc.message, 'errors': exc.errors})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {'field': '.'.join(str(part) for part in error['loc'] if part != 'body'), 'message': error['msg']}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={'message': 'Invalid request', 'errors': errors})


@app.exception_handler(ConfirmationRequired)
async def confirmation_required_handler(request: Request, exc: ConfirmationRequired):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={'message': exc.message, 'existing_count': exc.existing_count},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={'message': 'Internal server error'})


app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(projects.router)
app.include_router(quotes.router)
app.include_router(service_orders.router)
app.include_router(invoices.router)
app.include_router(purchase_orders.router)
app.include_router(payments.router)
app.include_router(personnel.router)
app.include_router(activities.router)
app.include_router(totals.router)
app.include_router(reports.router)
