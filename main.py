from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roomsplit.config import FRONTEND_ORIGINS
from roomsplit.errors import register_exception_handlers
from roomsplit.logging_utils import configure_logging
from roomsplit.routes import balance, expense

configure_logging()

app = FastAPI(
    title="RoomSplit Expense API",
    description="Log shared expenses, preview splits, and read balances and suggested settlements.",
    version="1.0.0",
)

# CORS: comma-separated frontend origins; * only for local dev
origins = [o.strip() for o in FRONTEND_ORIGINS.split(',') if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins if origins else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)
app.include_router(expense.router)
app.include_router(balance.router)

@app.get("/")
def read_root():
    return {"message": "RoomSplit expense service running"}

@app.get("/health")
def health():
    return {"status": "ok"}
