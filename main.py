import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from categories import CATEGORIES, EXPENSE_CATEGORIES, INCOME_CATEGORIES
from config import get_settings
from database import get_db, init_db
from periods import current_month, resolve_month
from schemas import (
    ApiResponse,
    BudgetComparisonOut,
    BudgetIn,
    BudgetOut,
    CategoryOut,
    CategoryRegistryOut,
    DashboardStatsOut,
    ImportResultOut,
    SpendingInsightOut,
    TransactionIn,
    TransactionOut,
)
from services import (
    BudgetService,
    CSVService,
    ConflictError,
    MetricsService,
    NotFoundError,
    TransactionService,
)

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


def _load_app_version() -> str:
    try:
        return version("finance-tracker")
    except PackageNotFoundError:
        return "unknown"


APP_VERSION = _load_app_version()

app = FastAPI(title="Finance Tracker", version=APP_VERSION)


@app.on_event("startup")
def startup_event():
    init_db()
    logger.info(f"startup: version={APP_VERSION}")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "error": message},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg", "Invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return _error(400, "; ".join(messages) or "Invalid request")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"unhandled_error: path={request.url.path}")
    return _error(500, "Internal server error")


def ok(data: object) -> dict[str, object]:
    return {"success": True, "data": data, "error": None}


def month_from_query(month: Optional[str]) -> str:
    if not month:
        return current_month()
    try:
        return resolve_month(month).key
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/health", response_model=ApiResponse[dict[str, str]])
def health():
    return ok({"status": "ok"})


@app.get("/categories", response_model=ApiResponse[CategoryRegistryOut])
def list_categories():
    def dump(items) -> list[CategoryOut]:
        return [CategoryOut(name=c.name, color=c.color, icon=c.icon) for c in items]

    return ok(
        CategoryRegistryOut(
            all=dump(CATEGORIES),
            expense=dump(EXPENSE_CATEGORIES),
            income=dump(INCOME_CATEGORIES),
        )
    )


@app.get("/transactions", response_model=ApiResponse[list[TransactionOut]])
def list_transactions(db: Session = Depends(get_db)):
    items = TransactionService(db).list_all()
    return ok([TransactionOut.from_model(txn) for txn in items])


@app.get("/transactions/export.csv")
def export_transactions_endpoint(db: Session = Depends(get_db)):
    transactions = TransactionService(db).list_all()
    csv_text = CSVService(db).export(transactions)
    return StreamingResponse(
        iter([csv_text]),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="transactions.csv"'},
    )


@app.post("/transactions/import", response_model=ApiResponse[ImportResultOut])
async def import_transactions(
    file: UploadFile = File(...), db: Session = Depends(get_db)
):
    try:
        content = (await file.read()).decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8") from exc
    count, errors = CSVService(db).commit(content)
    return ok(ImportResultOut(imported=count, errors=errors))


@app.post("/transactions", response_model=ApiResponse[TransactionOut])
def create_transaction(data: TransactionIn, db: Session = Depends(get_db)):
    txn = TransactionService(db).create(data)
    return ok(TransactionOut.from_model(txn))


@app.get("/transactions/{transaction_id}", response_model=ApiResponse[TransactionOut])
def get_transaction(transaction_id: int, db: Session = Depends(get_db)):
    try:
        txn = TransactionService(db).get(transaction_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ok(TransactionOut.from_model(txn))


@app.put("/transactions/{transaction_id}", response_model=ApiResponse[TransactionOut])
def update_transaction(
    transaction_id: int, data: TransactionIn, db: Session = Depends(get_db)
):
    try:
        txn = TransactionService(db).update(transaction_id, data)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ok(TransactionOut.from_model(txn))


@app.delete(
    "/transactions/{transaction_id}", response_model=ApiResponse[TransactionOut]
)
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    service = TransactionService(db)
    try:
        removed = TransactionOut.from_model(service.get(transaction_id))
        service.delete(transaction_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ok(removed)


@app.get("/budgets", response_model=ApiResponse[list[BudgetOut]])
def list_budgets(db: Session = Depends(get_db)):
    return ok([BudgetOut.from_model(b) for b in BudgetService(db).list_all()])


@app.get("/budgets/comparisons", response_model=ApiResponse[list[BudgetComparisonOut]])
def budget_comparisons(month: Optional[str] = None, db: Session = Depends(get_db)):
    rows = BudgetService(db).comparisons(month_from_query(month))
    return ok([BudgetComparisonOut.from_comparison(row) for row in rows])


@app.post("/budgets", response_model=ApiResponse[BudgetOut])
def create_budget(data: BudgetIn, db: Session = Depends(get_db)):
    try:
        budget = BudgetService(db).create(data)
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ok(BudgetOut.from_model(budget))


@app.put("/budgets/{budget_id}", response_model=ApiResponse[BudgetOut])
def update_budget(budget_id: int, data: BudgetIn, db: Session = Depends(get_db)):
    try:
        budget = BudgetService(db).update(budget_id, data)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ok(BudgetOut.from_model(budget))


@app.delete("/budgets/{budget_id}", response_model=ApiResponse[BudgetOut])
def delete_budget(budget_id: int, db: Session = Depends(get_db)):
    service = BudgetService(db)
    try:
        removed = BudgetOut.from_model(service.get(budget_id))
        service.delete(budget_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ok(removed)


@app.get("/dashboard", response_model=ApiResponse[DashboardStatsOut])
def dashboard(db: Session = Depends(get_db)):
    stats = MetricsService(db).dashboard()
    return ok(DashboardStatsOut.from_stats(stats))


@app.get("/insights", response_model=ApiResponse[list[SpendingInsightOut]])
def insights(month: Optional[str] = None, db: Session = Depends(get_db)):
    items = MetricsService(db).insights(month_from_query(month))
    return ok([SpendingInsightOut.from_insight(item) for item in items])


def main():
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
