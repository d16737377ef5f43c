import logging
import os
from typing import List, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import database
from errors import (
    DatabaseUnavailableError,
    InsufficientInventoryError,
    NotFoundError,
    ValidationError,
)
from orders import get_order, submit_order
from schemas import OrderEnvelope, OrderReceipt, OrderRequest, Product, ProductView

log = logging.getLogger(__name__)

app = FastAPI(title="Checkout API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------------
# Error mapping
# --------------

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"errors": exc.errors})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InsufficientInventoryError)
async def insufficient_inventory_handler(request: Request, exc: InsufficientInventoryError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(DatabaseUnavailableError)
async def database_unavailable_handler(request: Request, exc: DatabaseUnavailableError):
    log.error("Request to %s failed: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Database not available"})

# ---------
# Root/Test
# ---------

@app.get("/")
def read_root():
    return {"message": "Checkout API is running"}


@app.get("/health")
def health():
    response = {"backend": "running", "database": "not configured"}
    if database.db is not None:
        try:
            database.db.list_collection_names()
            response["database"] = "connected"
        except Exception as e:
            response["database"] = f"error: {str(e)[:50]}"
    return response

# ---------------
# Catalog Endpoints
# ---------------

@app.get("/api/products", response_model=List[ProductView])
def list_products(q: Optional[str] = None, limit: int = 50):
    filter_dict = {}
    if q:
        filter_dict["title"] = {"$regex": q, "$options": "i"}
    docs = database.get_documents("product", filter_dict, limit)
    return [ProductView.model_validate(database.to_str_id(d)) for d in docs]


@app.get("/api/products/{product_id}", response_model=ProductView)
def get_product(product_id: str):
    doc = database.find_product(product_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductView.model_validate(database.to_str_id(doc))


@app.post("/api/products", status_code=201)
def create_product(payload: Product):
    inserted_id = database.create_document("product", payload)
    return {"id": inserted_id}

# ---------------
# Orders Endpoints
# ---------------

@app.post("/api/orders", response_model=OrderReceipt)
def create_order(payload: OrderRequest, background_tasks: BackgroundTasks):
    return submit_order(payload, background_tasks)


@app.get("/api/orders/{order_number}", response_model=OrderEnvelope)
def read_order(order_number: str):
    return OrderEnvelope(order=get_order(order_number))


@app.on_event("startup")
async def startup_event():
    database.ensure_indexes()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
