from fastapi import APIRouter
from app.api.v1 import products, history, imports

api_router = APIRouter()

api_router.include_router(products.router, prefix="/products", tags=["Products"])
api_router.include_router(history.router, prefix="/history", tags=["Inventory History"])
api_router.include_router(imports.router, prefix="/import", tags=["Import / Export"])
