import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from lumber_sales.config import settings
from lumber_sales.db import init_db
from lumber_sales.logging_config import setup_logging
from lumber_sales.middleware import install_cors, install_request_logging
from lumber_sales.routers import addresses, customers, parties, sales_tax, ship_via, species, tickets
from lumber_sales.schemas import HealthOut
from lumber_sales.services.errors import InvoiceSequenceError, TicketPersistenceError

VERSION = '1.0.0'

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    logger.info('Lumber sales API ready')
    yield


app = FastAPI(title='Lumber Sales', version=VERSION, lifespan=lifespan)

install_cors(app)
install_request_logging(app)

api = APIRouter(prefix=settings.api_prefix)
api.include_router(tickets.router)
api.include_router(parties.router)
api.include_router(customers.router)
api.include_router(addresses.router)
api.include_router(species.router)
api.include_router(ship_via.router)
api.include_router(sales_tax.router)


@api.get('', response_model=HealthOut)
def health() -> HealthOut:
    return HealthOut(status='ok', message='Lumber sales API is running', version=VERSION)


app.include_router(api)


@app.exception_handler(TicketPersistenceError)
async def ticket_persistence_error_handler(request: Request, exc: TicketPersistenceError):
    return JSONResponse(status_code=500, content={'detail': str(exc)})


@app.exception_handler(InvoiceSequenceError)
async def invoice_sequence_error_handler(request: Request, exc: InvoiceSequenceError):
    logger.error('Invoice sequence unavailable on %s %s: %s', request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={'detail': str(exc)})
